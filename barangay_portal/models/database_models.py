from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any
from enum import Enum

# Field names mirror the Realtime Database tree, which is shared with the web client.


class CertificateStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    READY = "ready"
    COMPLETED = "completed"
    REJECTED = "rejected"
    ADDITIONAL_INFO = "additionalInfo"


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class BlotterStatus(str, Enum):
    PENDING = "pending"
    INVESTIGATING = "investigating"
    RESOLVED = "resolved"
    ADDITIONAL_INFO = "additionalInfo"
    CLOSED = "closed"


class BlotterPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class AnnouncementStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    EXPIRED = "expired"


class EventStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class VerificationStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class OfficialPosition(str, Enum):
    CAPTAIN = "captain"
    COUNCILOR = "councilor"
    SECRETARY = "secretary"
    TREASURER = "treasurer"
    SK_CHAIRPERSON = "skChairperson"


class StaffStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class RecordModel(BaseModel):
    """Base for stored records. Unknown keys are kept so type-specific extras round-trip."""

    model_config = ConfigDict(extra="allow")

    id: str
    createdAt: int = 0
    updatedAt: int = 0

    @classmethod
    def from_record(cls, record_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Normalize a raw tree node into a plain dict with defaults filled in."""
        return cls(**{**(data or {}), "id": record_id}).model_dump(exclude_none=True)


# Certificate Model
class Certificate(RecordModel):
    referenceNumber: Optional[str] = None
    type: str = ""
    requestedBy: str = ""
    userId: Optional[str] = None
    emailToNotify: Optional[str] = None
    purpose: str = ""
    requestedOn: Optional[str] = None
    status: str = Field(default="pending")  # pending, processing, ready, completed, rejected, additionalInfo
    estimatedCompletion: Optional[str] = None
    notes: Optional[str] = None
    rejectedReason: Optional[str] = None
    completedOn: Optional[str] = None
    photoUrl: Optional[str] = None
    signatureUrl: Optional[str] = None
    hasSignature: bool = False
    pdfUrl: Optional[str] = None
    generatedBy: Optional[str] = None
    generatedOn: Optional[str] = None


# Appointment Model
class Appointment(RecordModel):
    referenceNumber: Optional[str] = None
    userId: Optional[str] = None
    title: str = ""
    description: str = ""
    date: str = ""  # YYYY-MM-DD
    time: str = ""  # HH:MM
    requestedBy: str = ""
    contactNumber: str = ""
    email: str = ""
    status: str = Field(default="pending")  # pending, confirmed, cancelled, completed
    notes: Optional[str] = None


# Blotter Model
class BlotterEntry(RecordModel):
    referenceNumber: Optional[str] = None
    type: str = ""
    description: str = ""
    reportedBy: str = ""
    userId: Optional[str] = None
    contactNumber: str = ""
    email: str = ""
    status: str = Field(default="pending")  # pending, investigating, resolved, additionalInfo, closed
    priority: str = Field(default="medium")  # low, medium, high, urgent
    location: Optional[str] = None
    incidentDate: Optional[str] = None
    date: Optional[str] = None
    notes: Optional[str] = None


# Announcement Model
class Announcement(RecordModel):
    referenceNumber: Optional[str] = None
    title: str = ""
    description: str = ""
    category: str = "Notice"  # Event, Notice, Important, Emergency
    image: Optional[str] = None
    visibility: str = "public"  # public, residents
    author: str = ""
    status: str = Field(default="draft")  # draft, published, expired
    publishedOn: Optional[str] = None  # YYYY-MM-DD
    expiresOn: Optional[str] = None  # YYYY-MM-DD


# Event Model
class Event(RecordModel):
    referenceNumber: Optional[str] = None
    name: str = ""
    date: str = ""
    time: str = ""
    location: str = ""
    description: str = ""
    category: str = "community"  # community, health, education, sports, culture, government
    organizer: str = ""
    contact: str = ""
    image: Optional[str] = None
    status: str = Field(default="active")  # active, inactive
    featured: bool = False



# Official Model
class Official(RecordModel):
    name: str = ""
    position: str = ""  # captain, councilor, secretary, treasurer, skChairperson
    term: str = ""
    birthday: Optional[str] = None
    email: str = ""
    phone: str = ""
    officeHours: Optional[str] = None
    committees: List[str] = Field(default_factory=list)
    biography: Optional[str] = None
    message: Optional[str] = None
    projects: List[str] = Field(default_factory=list)
    achievements: List[str] = Field(default_factory=list)
    photo: Optional[str] = None
    photoPublicId: Optional[str] = None
    status: str = Field(default="active")  # active, inactive


# Staff Models (stored under users/{uid})
class StaffPermissions(BaseModel):
    canManageUsers: bool = False
    canManageEvents: bool = True
    canManageCertificates: bool = True
    canManageAppointments: bool = True
    canViewAnalytics: bool = False
    canManageSettings: bool = False
    canManageBlotter: bool = True
    canManageOfficials: bool = False
    canManageResidents: bool = False
    canManageAnnouncements: bool = True

    @classmethod
    def for_role(cls, role: str) -> "StaffPermissions":
        is_admin = role == "admin"
        return cls(
            canManageUsers=is_admin,
            canViewAnalytics=is_admin,
            canManageSettings=is_admin,
            canManageOfficials=is_admin,
            canManageResidents=is_admin,
        )


class StaffMember(RecordModel):
    uid: Optional[str] = None
    email: str = ""
    role: str = ""  # official, admin (residents share users/ with role "resident")
    firstName: str = ""
    lastName: str = ""
    phoneNumber: Optional[str] = None
    address: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None
    employeeId: Optional[str] = None
    hireDate: Optional[int] = None
    status: str = Field(default="active")  # active, inactive, suspended
    permissions: Optional[StaffPermissions] = None


# Resident Models
class PersonalInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    firstName: str = ""
    middleName: Optional[str] = None
    lastName: str = ""
    suffix: Optional[str] = None
    dateOfBirth: Optional[str] = None
    placeOfBirth: Optional[str] = None
    gender: Optional[str] = None
    civilStatus: Optional[str] = None

    @property
    def full_name(self) -> str:
        parts = [self.firstName, self.middleName, self.lastName, self.suffix]
        return " ".join(part for part in parts if part)


class ContactInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    email: str = ""
    phoneNumber: str = ""
    alternateNumber: Optional[str] = None


class AddressInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    houseNumber: Optional[str] = None
    street: Optional[str] = None
    purok: Optional[str] = None
    barangay: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    zipCode: Optional[str] = None
    fullAddress: str = ""


class EmergencyContact(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = ""
    phoneNumber: str = ""
    relation: str = ""


class Verification(BaseModel):
    model_config = ConfigDict(extra="allow")

    idFrontPhotoUrl: Optional[str] = None
    idBackPhotoUrl: Optional[str] = None
    selfiePhotoUrl: Optional[str] = None
    status: str = Field(default="pending")  # pending, verified, rejected
    submittedAt: int = 0
    reviewedAt: Optional[int] = None
    reviewedBy: Optional[str] = None
    notes: Optional[str] = None


class Resident(BaseModel):
    model_config = ConfigDict(extra="allow")

    uid: str
    personalInfo: PersonalInfo = Field(default_factory=PersonalInfo)
    contactInfo: ContactInfo = Field(default_factory=ContactInfo)
    addressInfo: AddressInfo = Field(default_factory=AddressInfo)
    emergencyContact: EmergencyContact = Field(default_factory=EmergencyContact)
    verification: Verification = Field(default_factory=Verification)
    registrationDate: int = 0
    status: str = Field(default="active")  # active, inactive


# Archive Models
class ArchivePath(BaseModel):
    path: str
    value: Any = None


class ArchiveEntry(BaseModel):
    entity: str
    id: str
    archivedAt: int
    archivedBy: Optional[str] = None
    paths: List[ArchivePath] = Field(default_factory=list)
    preview: Dict[str, Any] = Field(default_factory=dict)


# Settings Models
class BarangaySettings(BaseModel):
    barangayName: str
    municipality: str
    address: str
    contact: str
    email: str


class HoursRange(BaseModel):
    start: str
    end: str


class OfficeHours(BaseModel):
    weekdays: HoursRange
    weekends: HoursRange


class NotificationSettings(BaseModel):
    emailNotifications: bool = True
    smsNotifications: bool = False
    systemNotifications: bool = True


class RoleSettings(BaseModel):
    description: str
    permissions: List[str] = Field(default_factory=list)


class UserRoleSettings(BaseModel):
    superAdmin: RoleSettings
    staff: RoleSettings
    resident: RoleSettings


class CertificateSettings(BaseModel):
    signatureUrl: Optional[str] = None
    officialName: str
    officialPosition: str


class AllSettings(BaseModel):
    barangay: BarangaySettings
    officeHours: OfficeHours
    notifications: NotificationSettings
    userRoles: UserRoleSettings
    certificateSettings: CertificateSettings
