# models.py
"""
Per-student course progress.

One CourseProgress per (student, course), created lazily on the first lecture
view or quiz outcome, with one entry per watched lecture and per attempted
quiz.
"""

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from accounts.models import User
from courses.models import Course, Lecture
from quizzes.models import Quiz


class CourseProgress(models.Model):
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="course_progress")
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="student_progress")
    # Only ever switched back to False by an explicit reset
    completed = models.BooleanField(default=False)
    completion_date = models.DateTimeField(null=True, blank=True)
    progress_percentage = models.PositiveIntegerField(
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ("student", "course")
        verbose_name_plural = "course progress"

    def __str__(self):
        return f"{self.student.email} - {self.course.title} ({self.progress_percentage}%)"


class LectureProgress(models.Model):
    course_progress = models.ForeignKey(CourseProgress, on_delete=models.CASCADE, related_name="lectures_progress")
    lecture = models.ForeignKey(Lecture, on_delete=models.CASCADE, related_name="student_progress")
    viewed = models.BooleanField(default=False)
    date_viewed = models.DateTimeField(null=True, blank=True)
    progress_value = models.FloatField(
        default=0.0,
        validators=[MinValueValidator(0.0), MaxValueValidator(1.0)],
    )
    rewatch_count = models.PositiveIntegerField(default=0)
    last_watched_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        unique_together = ("course_progress", "lecture")
        ordering = ["lecture__order", "lecture_id"]

    def __str__(self):
        return f"Lecture {self.lecture_id}: {self.progress_value:.2f}"


class QuizProgress(models.Model):
    course_progress = models.ForeignKey(CourseProgress, on_delete=models.CASCADE, related_name="quizzes_progress")
    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name="student_progress")
    completed = models.BooleanField(default=False)
    best_score = models.PositiveIntegerField(default=0)
    attempts = models.PositiveIntegerField(default=0)
    last_attempt_date = models.DateTimeField(null=True, blank=True)

    class Meta:
        unique_together = ("course_progress", "quiz")
        ordering = ["quiz_id"]

    def __str__(self):
        return f"Quiz {self.quiz_id}: best {self.best_score}"
