"""Application-wide constants.

This module centralizes the fixed vocabularies shared by models and
request schemas. For environment-specific configuration, see config.py.
"""

from typing import Literal

# =============================================================================
# Users
# =============================================================================

Role = Literal["user", "instructor", "admin"]
ROLE_USER: Role = "user"
ROLE_INSTRUCTOR: Role = "instructor"
ROLE_ADMIN: Role = "admin"

BeltRank = Literal["white", "yellow", "orange", "green", "blue", "red", "black"]

# Issued when JWT_EXPIRE_MINUTES is 0
NON_EXPIRING_TOKEN_DAYS: int = 36500

# =============================================================================
# Events
# =============================================================================

EventType = Literal[
    "tournament",
    "seminar",
    "belt-test",
    "training-camp",
    "workshop",
    "demonstration",
    "other",
]
EligibleBelt = Literal["white", "yellow", "orange", "green", "blue", "red", "black", "all"]
AgeGroup = Literal["kids", "teens", "adults", "seniors", "all"]

# =============================================================================
# Gallery
# =============================================================================

MediaType = Literal["image", "video"]
GalleryCategory = Literal[
    "tournament",
    "training",
    "demonstration",
    "celebration",
    "belt-ceremony",
    "seminar",
    "other",
]

# =============================================================================
# Contact
# =============================================================================

EnquiryType = Literal["general", "membership", "event", "training", "other"]
ContactStatus = Literal["new", "read", "replied", "closed"]

# =============================================================================
# Enrollments
# =============================================================================

Gender = Literal["male", "female", "other", "prefer-not-to-say"]
Program = Literal[
    "beginners",
    "intermediate",
    "advanced",
    "competitive",
    "childrens",
    "teens",
    "adults",
]
Experience = Literal["none", "less-than-1", "1-3", "3-5", "5-plus"]
ReferralSource = Literal[
    "friend",
    "social-media",
    "search-engine",
    "event",
    "advertisement",
    "other",
]
EnrollmentStatus = Literal["pending", "approved", "rejected"]

REFERENCE_NUMBER_LENGTH: int = 8
