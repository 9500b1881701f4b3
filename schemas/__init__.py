# 基础模式
from .base import CamelModel, RequestModel, UserSummary, MessageResponse

# 用户与认证相关模式
from .user import UserCreate, UserUpdate, UserResponse, USER_UPDATE_FIELDS
from .auth import LoginRequest, LoginResponse, RegisterRequest, RegisterResponse

# 项目相关模式
from .project import (
    ProjectCreate, ProjectUpdate, ProjectResponse, ProjectMemberIn,
    ProjectMemberResponse, MemberAdd, PROJECT_UPDATE_FIELDS
)

# 缺陷相关模式
from .issue import (
    IssueCreate, IssueUpdate, IssueResponse, RelatedLink, WatcherAdd, ISSUE_UPDATE_FIELDS
)

# 评论、活动相关模式
from .comment import CommentCreate, CommentUpdate, CommentResponse
from .activity import ActivityCreate, ActivityResponse

# 迭代、史诗相关模式
from .sprint import SprintCreate, SprintUpdate, SprintResponse, SprintDetailResponse, SPRINT_UPDATE_FIELDS
from .epic import EpicCreate, EpicUpdate, EpicResponse, EpicDetailResponse, EPIC_UPDATE_FIELDS

# 标签、缺陷类型相关模式
from .label import (
    LabelCreate, LabelUpdate, LabelResponse, LABEL_UPDATE_FIELDS,
    IssueTypeCreate, IssueTypeUpdate, IssueTypeResponse, ISSUE_TYPE_UPDATE_FIELDS
)
