"""
Accounts component - Registration and credential sign-in.
"""

from .component import run_login, run_register
from .models import AccountOutput, LoginInput, RegisterInput
from .ports import PasswordHasherPort, UserRepoPort

__all__ = [
    "run_login",
    "run_register",
    "AccountOutput",
    "LoginInput",
    "RegisterInput",
    "PasswordHasherPort",
    "UserRepoPort",
]
