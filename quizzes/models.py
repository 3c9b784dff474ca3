# models.py
"""
Quiz definitions and the attempt ledger.

1.  Quiz and its embedded questions (authored by instructors)
2.  QuizAttempt and its graded answers (one row per submitted question)
"""

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from accounts.models import User
from courses.models import Course, Lecture

from .constants import (
    DEFAULT_ATTEMPTS_ALLOWED,
    DEFAULT_PASSING_SCORE,
    MANUAL_REVIEW_TYPES,
    QUESTION_TYPE_CHOICES,
    QUIZ_TYPE_CHOICES,
)


# ---------------------------------------------------------------------------
# Quiz definitions
# ---------------------------------------------------------------------------

class Quiz(models.Model):
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="quizzes")
    # null for final quizzes
    lecture = models.ForeignKey(Lecture, on_delete=models.CASCADE, null=True, blank=True, related_name="quizzes")
    quiz_type = models.CharField(max_length=10, choices=QUIZ_TYPE_CHOICES)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    passing_score = models.PositiveIntegerField(
        default=DEFAULT_PASSING_SCORE,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    time_limit = models.PositiveIntegerField(null=True, blank=True, help_text="Minutes")
    attempts_allowed = models.PositiveIntegerField(default=DEFAULT_ATTEMPTS_ALLOWED)
    enforce_attempt_limit = models.BooleanField(default=True)
    enforce_time_limit = models.BooleanField(default=True)
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(User, on_delete=models.CASCADE, related_name="authored_quizzes")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["course_id", "id"]
        verbose_name_plural = "quizzes"
        indexes = [
            models.Index(fields=["course", "is_active"], name="quiz_course_active_idx"),
            models.Index(fields=["created_by"], name="quiz_created_by_idx"),
        ]

    def __str__(self):
        return f"{self.title} ({self.quiz_type})"

    @property
    def total_points(self):
        return sum(q.points for q in self.questions.all())

    @property
    def is_final(self):
        return self.lecture_id is None


class Question(models.Model):
    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name="questions")
    question_type = models.CharField(max_length=30, choices=QUESTION_TYPE_CHOICES)
    prompt = models.TextField()
    options = models.JSONField(default=list, blank=True, help_text="Option strings for multiple choice")
    # Zero-based option index for multiple choice, "true"/"false" for true-false,
    # expected text for short answer, optional sample answer for manual-review types.
    correct_answer = models.CharField(max_length=1000, blank=True, default="")
    points = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["order", "id"]

    def __str__(self):
        return f"{self.prompt[:50]} ({self.question_type})"

    @property
    def needs_manual_review(self):
        return self.question_type in MANUAL_REVIEW_TYPES


# ---------------------------------------------------------------------------
# Attempt ledger
# ---------------------------------------------------------------------------

class QuizAttempt(models.Model):
    class Status(models.TextChoices):
        IN_PROGRESS = "in_progress", "In progress"
        # Short-lived lock held while a submission is being graded.
        PROCESSING = "processing", "Processing"
        COMPLETED = "completed", "Completed"

    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name="attempts")
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="quiz_attempts")
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="quiz_attempts")
    attempt_number = models.PositiveIntegerField()
    score = models.PositiveIntegerField(default=0)  # Percentage score (0-100)
    total_points = models.PositiveIntegerField(default=0)
    points_earned = models.FloatField(default=0.0)
    passed = models.BooleanField(default=False)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.IN_PROGRESS)
    started_at = models.DateTimeField()
    completed_at = models.DateTimeField(null=True, blank=True)
    time_spent = models.PositiveIntegerField(default=0)  # seconds
    locked_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        # Multiple attempts per student per quiz are allowed
        ordering = ["attempt_number", "id"]
        indexes = [
            models.Index(fields=["quiz", "student"], name="attempt_quiz_student_idx"),
            models.Index(fields=["status"], name="attempt_status_idx"),
        ]

    def __str__(self):
        return f"{self.student.email} - {self.quiz.title} - Attempt {self.attempt_number} ({self.status})"


class AttemptAnswer(models.Model):
    attempt = models.ForeignKey(QuizAttempt, on_delete=models.CASCADE, related_name="answers")
    # SET_NULL keeps the graded history when an instructor replaces the question set.
    question = models.ForeignKey(Question, on_delete=models.SET_NULL, null=True, related_name="attempt_answers")
    answer = models.TextField()
    is_correct = models.BooleanField(null=True)  # null until a manual-review answer is graded
    points_earned = models.FloatField(default=0.0)
    needs_review = models.BooleanField(default=False)
    reviewed_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="reviewed_answers")
    reviewed_at = models.DateTimeField(null=True, blank=True)
    review_notes = models.TextField(blank=True)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"Attempt {self.attempt_id} - Question {self.question_id}"
