"""
Importance weights for activities and tasks.

Values are fixed by design. Unknown types and subtypes fall back to a
default weight instead of raising.
"""

ACTIVITY_TYPES = ("meeting", "formation", "general_assembly", "event")

DEFAULT_ACTIVITY_WEIGHT = 5
EVENT_WEIGHT = 8

GENERAL_ASSEMBLY_WEIGHTS = {"national": 12, "international": 12, "zonal": 9}
DEFAULT_GENERAL_ASSEMBLY_WEIGHT = 6

MEETING_WEIGHTS = {"official": 10, "committee": 7}
DEFAULT_MEETING_WEIGHT = 8

FORMATION_WEIGHTS = {"official_session": 9, "important_training": 7, "member_to_member": 4}
DEFAULT_FORMATION_WEIGHT = 5

TASK_COMPLEXITY_WEIGHTS = {"lead": 15, "major": 10, "minor": 4}
DEFAULT_TASK_WEIGHT = 4


def activity_importance(activity_type, subtype=None) -> int:
    if activity_type == "general_assembly":
        return GENERAL_ASSEMBLY_WEIGHTS.get(subtype, DEFAULT_GENERAL_ASSEMBLY_WEIGHT)
    if activity_type == "meeting":
        return MEETING_WEIGHTS.get(subtype, DEFAULT_MEETING_WEIGHT)
    if activity_type == "formation":
        return FORMATION_WEIGHTS.get(subtype, DEFAULT_FORMATION_WEIGHT)
    if activity_type == "event":
        return EVENT_WEIGHT
    return DEFAULT_ACTIVITY_WEIGHT


def activity_subtype(activity):
    """Pull the subtype out of the type-specific detail record, if any."""
    if activity is None:
        return None
    if activity.type == "general_assembly" and activity.general_assembly is not None:
        return activity.general_assembly.assembly_type
    if activity.type == "meeting" and activity.meeting is not None:
        return activity.meeting.meeting_type
    if activity.type == "formation" and activity.formation is not None:
        return activity.formation.training_type
    return None


def activity_multiplier(activity) -> int:
    if activity is None:
        return DEFAULT_ACTIVITY_WEIGHT
    return activity_importance(activity.type, activity_subtype(activity))


def task_multiplier(complexity) -> int:
    return TASK_COMPLEXITY_WEIGHTS.get(complexity, DEFAULT_TASK_WEIGHT)
