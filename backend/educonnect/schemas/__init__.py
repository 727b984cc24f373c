# Pydantic schemas
from educonnect.schemas.auth import (
    UserRegister,
    UserLogin,
    UserResponse,
    UserWithProfileResponse,
    UserSummary,
    StudentProfileResponse,
    TeacherProfileResponse,
    SessionResponse,
    LoginResponse,
)
from educonnect.schemas.classroom import (
    ClassCreate,
    ClassUpdate,
    ClassResponse,
    JoinClassRequest,
    AddStudentRequest,
    EnrollmentReview,
    EnrollmentResponse,
)
from educonnect.schemas.assignment import (
    AssignmentCreate,
    AssignmentUpdate,
    AssignmentResponse,
    SubmissionCreate,
    GradeSubmission,
    SubmissionResponse,
)
from educonnect.schemas.exam import (
    ExamCreate,
    ExamUpdate,
    ExamResponse,
    QuestionCreate,
    QuestionResponse,
    QuestionWithAnswerResponse,
    AttemptUpdate,
    AttemptResponse,
    AttemptResult,
)
from educonnect.schemas.attendance import (
    AttendanceSessionCreate,
    AttendanceRecordsUpdate,
    AttendanceSessionResponse,
)
from educonnect.schemas.chat import ChatRoomCreate, MessageCreate, ChatMessageResponse
from educonnect.schemas.misc import (
    NotificationResponse,
    MarkNotificationsRead,
    TaskCreate,
    TaskUpdate,
    TaskResponse,
    AnnouncementCreate,
    AnnouncementUpdate,
    AnnouncementResponse,
    ProfileUpdate,
)
from educonnect.schemas.admin import AdminUserUpdate, AdminClassCreate
