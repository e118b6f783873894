from .users import UserAccount, UserRole
from .classes import SchoolClass
from .subjects import Subject
from .files import FileRecord
