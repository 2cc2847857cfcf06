"""Enumerations shared by the application entity and its collaborators."""

from enum import Enum


class DocumentType(str, Enum):
    CC = "CC"  # Citizenship card
    CE = "CE"  # Foreigner identity card
    PAS = "PAS"  # Passport
    NIT = "NIT"  # Tax identification number


class Gender(str, Enum):
    M = "M"
    F = "F"
    OTHER = "OTHER"
    PREFER_NOT_TO_SAY = "PREFER_NOT_TO_SAY"


class EmploymentStatus(str, Enum):
    EMPLOYED = "EMPLOYED"
    SELF_EMPLOYED = "SELF_EMPLOYED"
    RETIRED = "RETIRED"
    OTHER = "OTHER"


class ContractType(str, Enum):
    PERMANENT = "PERMANENT"
    FIXED_TERM = "FIXED_TERM"
    SERVICES = "SERVICES"
    NOT_APPLICABLE = "N/A"


class CardTier(str, Enum):
    """Card product category, each with its own income and limit rules."""

    CLASICA = "CLASICA"
    ORO = "ORO"
    PLATINUM = "PLATINUM"
    BLACK = "BLACK"


class Franchise(str, Enum):
    VISA = "VISA"
    MASTERCARD = "MASTERCARD"


class Channel(str, Enum):
    WEB = "WEB"
    MOBILE = "MOBILE"
    CALL_CENTER = "CALL_CENTER"


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class CoreStatus(str, Enum):
    """Status of an application as reported by the core banking system."""

    PENDING_VALIDATION = "PENDING_VALIDATION"
    IN_REVIEW = "IN_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
