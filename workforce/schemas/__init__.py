from .common import CamelModel, PaginationOut, MessageOut, UserRef, ErrorOut
from .user import UserCreate, UserLogin, UserUpdate, UserOut, UserProfile, UserBasic, TeamBrief
from .tokens import (
    RefreshRequest,
    LogoutRequest,
    TokenPair,
    AuthResponse,
    LoginResponse,
    RefreshResponse,
    MeResponse,
)
from .task import (
    TaskCreate,
    TaskUpdate,
    TaskStatusUpdate,
    TaskOut,
    TaskListOut,
    TaskStatsOut,
    MonthlyTrend,
)
from .team import TeamCreate, TeamMemberAdd, TeamOut, BoardCreate, BoardOut
from .notification import NotificationOut, NotificationListOut, UnreadCountOut, MarkAllReadOut
