"""
Exceptions raised by arbiter estimators.
"""
from ._errors import *
