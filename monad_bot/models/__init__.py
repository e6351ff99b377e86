from .chains import *
from .config_model import *
from .onchain_model import *
