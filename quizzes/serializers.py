from rest_framework import serializers

from quizzes.models import AttemptAnswer, Question, Quiz, QuizAttempt


# ---------------------------------------------------------------------------
# Instructor views (full definition)
# ---------------------------------------------------------------------------

class QuestionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Question
        fields = ['id', 'question_type', 'prompt', 'options', 'correct_answer', 'points', 'order']


class QuizSerializer(serializers.ModelSerializer):
    questions = QuestionSerializer(many=True, read_only=True)
    total_points = serializers.IntegerField(read_only=True)

    class Meta:
        model = Quiz
        fields = [
            'id', 'course', 'lecture', 'quiz_type', 'title', 'description',
            'passing_score', 'time_limit', 'attempts_allowed',
            'enforce_attempt_limit', 'enforce_time_limit', 'is_active',
            'created_by', 'created_at', 'updated_at', 'total_points', 'questions',
        ]
        read_only_fields = fields


class AttemptAnswerSerializer(serializers.ModelSerializer):
    class Meta:
        model = AttemptAnswer
        fields = [
            'id', 'question', 'answer', 'is_correct', 'points_earned',
            'needs_review', 'reviewed_by', 'reviewed_at', 'review_notes',
        ]


class InstructorAttemptSerializer(serializers.ModelSerializer):
    student_email = serializers.EmailField(source='student.email', read_only=True)
    student_name = serializers.SerializerMethodField()
    answers = AttemptAnswerSerializer(many=True, read_only=True)

    class Meta:
        model = QuizAttempt
        fields = [
            'id', 'student', 'student_email', 'student_name', 'attempt_number',
            'score', 'points_earned', 'total_points', 'passed', 'status',
            'started_at', 'completed_at', 'time_spent', 'answers',
        ]

    def get_student_name(self, obj):
        return f"{obj.student.first_name} {obj.student.last_name}".strip()


# ---------------------------------------------------------------------------
# Student views (correct answers never exposed before completion)
# ---------------------------------------------------------------------------

class StudentQuestionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Question
        fields = ['id', 'question_type', 'prompt', 'options', 'points', 'order']


class AttemptSummarySerializer(serializers.ModelSerializer):
    attempt_id = serializers.IntegerField(source='id', read_only=True)

    class Meta:
        model = QuizAttempt
        fields = [
            'attempt_id', 'attempt_number', 'score', 'passed', 'status',
            'started_at', 'completed_at', 'time_spent',
        ]


class StudentQuizSerializer(serializers.ModelSerializer):
    questions = StudentQuestionSerializer(many=True, read_only=True)
    total_points = serializers.IntegerField(read_only=True)
    attempts = serializers.SerializerMethodField()

    class Meta:
        model = Quiz
        fields = [
            'id', 'course', 'lecture', 'quiz_type', 'title', 'description',
            'passing_score', 'time_limit', 'attempts_allowed', 'total_points',
            'questions', 'attempts',
        ]

    def get_attempts(self, obj):
        return AttemptSummarySerializer(getattr(obj, 'student_attempts', []), many=True).data


class StartedAttemptSerializer(serializers.ModelSerializer):
    attempt_id = serializers.IntegerField(source='id', read_only=True)
    time_limit = serializers.IntegerField(source='quiz.time_limit', read_only=True)

    class Meta:
        model = QuizAttempt
        fields = ['attempt_id', 'attempt_number', 'started_at', 'time_limit', 'total_points']

