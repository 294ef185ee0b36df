from .user import User
from .form import Form
from .question import Question
from .response import Response
from .answer import Answer
# base and mixins are imported by the above as needed
