from orchestrate.models.user import User, UserRole, UserStatus
from orchestrate.models.room import Room
from orchestrate.models.booking import Booking, BookingStatus
from orchestrate.models.project import Project, ProjectMember, ProjectStatus
from orchestrate.models.task import Task, TaskStatus, TaskPriority
