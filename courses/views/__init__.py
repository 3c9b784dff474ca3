from .enrollment_views import *
