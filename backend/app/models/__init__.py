from .job import Job
from .proposal import Proposal
from .user import User

__all__ = ["Job", "Proposal", "User"]
