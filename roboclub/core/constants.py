"""Global constants for the roboclub application."""

# Firestore collections
USERS_COLLECTION = "users"
ACTIVITIES_COLLECTION = "activities"
ATTENDANCES_COLLECTION = "attendances"
GROUP_PARENTS_COLLECTION = "group_parents"
SUB_GROUPS_COLLECTION = "sub_groups"

# Firestore rejects batches above 500 writes
FIRESTORE_BATCH_LIMIT = 500

# Attendance statuses
STATUS_PRESENT = "present"
STATUS_LATE = "late"
STATUS_EXCUSED = "excused"
STATUS_SICK = "sick"
STATUS_ABSENT = "absent"
STATUS_PENDING_APPROVAL = "pending_approval"

ATTENDANCE_STATUSES = (
    STATUS_PRESENT,
    STATUS_LATE,
    STATUS_EXCUSED,
    STATUS_SICK,
    STATUS_ABSENT,
    STATUS_PENDING_APPROVAL,
)

ATTENDANCE_STATUS_LABELS = {
    STATUS_PRESENT: "Present",
    STATUS_LATE: "Late",
    STATUS_EXCUSED: "Excused",
    STATUS_SICK: "Sick",
    STATUS_ABSENT: "Absent",
    STATUS_PENDING_APPROVAL: "Pending Approval",
}

# Single-letter codes for the recap table
ATTENDANCE_STATUS_SHORT_LABELS = {
    STATUS_PRESENT: "P",
    STATUS_LATE: "L",
    STATUS_EXCUSED: "E",
    STATUS_SICK: "S",
    STATUS_ABSENT: "A",
    STATUS_PENDING_APPROVAL: "?",
}

ATTENDANCE_POINTS = {
    STATUS_PRESENT: 100,
    STATUS_LATE: 75,
    STATUS_EXCUSED: 50,
    STATUS_SICK: 50,
    STATUS_ABSENT: 0,
    STATUS_PENDING_APPROVAL: 0,
}

METHOD_QR_CODE = "qr_code"
METHOD_MANUAL = "manual"
ATTENDANCE_METHODS = (METHOD_QR_CODE, METHOD_MANUAL)

# Attendance scoring
LATE_ATTENDANCE_WEIGHT = 0.75
LOW_ATTENDANCE_THRESHOLD = 25
ABSENCE_HIGHLIGHT_THRESHOLD = 25

# Sub-group naming
SUB_GROUP_NAME_PREFIX = "Group"

DEFAULT_OR_PERIOD = "OR 21"
