from .instructor_views import *
from .student_views import *
