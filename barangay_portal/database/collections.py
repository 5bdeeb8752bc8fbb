# Collection Names (top-level paths in the Realtime Database tree)
COLLECTIONS = {
    'certificates': 'certificates',
    'appointments': 'appointments',
    'blotter': 'blotter',
    'announcements': 'announcements',
    'events': 'events',
    'residents': 'residents',
    'officials': 'officials',
    'users': 'users',
    'archives': 'archives',
    'settings': 'settings',
    'fcm_tokens': 'fcmTokens',
    'fcm_tokens_by_role': 'fcmTokensByRole',
    'counters': 'counters',
}

# Reference number prefixes per collection
REFERENCE_PREFIXES = {
    'certificates': 'CERT',
    'appointments': 'APT',
    'blotter': 'BLT',
    'announcements': 'ANN',
    'events': 'EVT',
}

# Collection Structure Documentation
COLLECTION_SCHEMAS = {
    'certificates': {
        'fields': ['referenceNumber', 'type', 'requestedBy', 'userId', 'emailToNotify', 'purpose', 'requestedOn', 'status', 'estimatedCompletion', 'notes', 'rejectedReason', 'completedOn', 'photoUrl', 'signatureUrl', 'hasSignature', 'pdfUrl', 'generatedBy', 'generatedOn'],
        'required': ['type', 'requestedBy', 'emailToNotify', 'purpose'],
        'indexes': ['status', 'userId'],
    },
    'appointments': {
        'fields': ['referenceNumber', 'userId', 'title', 'description', 'date', 'time', 'requestedBy', 'contactNumber', 'email', 'status', 'notes'],
        'required': ['title', 'description', 'date', 'time', 'requestedBy', 'contactNumber', 'email'],
        'indexes': ['status', 'userId'],
    },
    'blotter': {
        'fields': ['referenceNumber', 'type', 'description', 'reportedBy', 'userId', 'contactNumber', 'email', 'status', 'priority', 'location', 'incidentDate', 'date', 'notes'],
        'required': ['type', 'description', 'reportedBy', 'contactNumber', 'email', 'priority'],
        'indexes': ['status', 'priority', 'userId'],
    },
    'announcements': {
        'fields': ['referenceNumber', 'title', 'description', 'category', 'image', 'visibility', 'author', 'status', 'publishedOn', 'expiresOn'],
        'required': ['title', 'description', 'category', 'visibility', 'author', 'expiresOn'],
        'indexes': ['status', 'category'],
    },
    'events': {
        'fields': ['referenceNumber', 'name', 'date', 'time', 'location', 'description', 'category', 'organizer', 'contact', 'image', 'status', 'featured'],
        'required': ['name', 'date', 'time', 'location', 'description', 'organizer', 'contact'],
        'indexes': ['status', 'category', 'featured'],
    },
    'residents': {
        'fields': ['personalInfo', 'contactInfo', 'addressInfo', 'emergencyContact', 'verification', 'registrationDate', 'status'],
        'required': ['personalInfo', 'contactInfo', 'addressInfo', 'verification'],
        'indexes': ['status'],
    },
    'officials': {
        'fields': ['name', 'position', 'term', 'birthday', 'email', 'phone', 'officeHours', 'committees', 'biography', 'message', 'projects', 'achievements', 'photo', 'photoPublicId', 'status'],
        'required': ['name', 'position', 'term'],
        'indexes': ['position', 'status'],
    },
    # Staff accounts live under users/{uid} next to resident users, told apart by role
    'users': {
        'fields': ['uid', 'email', 'role', 'firstName', 'lastName', 'phoneNumber', 'address', 'position', 'department', 'employeeId', 'hireDate', 'status', 'permissions', 'verificationStatus'],
        'required': ['email', 'role', 'firstName', 'lastName'],
        'indexes': ['role'],
    },
    'archives': {
        'fields': ['entity', 'id', 'archivedAt', 'archivedBy', 'paths', 'preview'],
        'required': ['entity', 'id', 'archivedAt', 'paths'],
        'indexes': ['archivedAt'],
    },
    # counters/{PREFIX} holds a bare integer (the last issued sequence), not an object
    'counters': {
        'fields': [],
        'required': [],
        'indexes': [],
    },
}


def missing_required_fields(collection: str, data: dict) -> list:
    """Return the required fields of `collection` that are absent or empty in `data`."""
    required = COLLECTION_SCHEMAS.get(collection, {}).get('required', [])
    return [field for field in required if not data.get(field)]
