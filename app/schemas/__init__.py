from .user import UserCreate, UserUpdate, UserLogin, UserOut, UserBasic
from .tokens import LoginResponse, SessionOut
from .project import ProjectCreate, ProjectUpdate, ProjectBase, ProjectSummary, ProjectOut, ProjectMemberAdd
from .task import TaskCreate, TaskUpdate, TaskStatusUpdate, TaskOut, TaskDeleteOut
