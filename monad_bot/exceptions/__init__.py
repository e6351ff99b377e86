from .api_exceptions import *
from .custom_exceptions import *
