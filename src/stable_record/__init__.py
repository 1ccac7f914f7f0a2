"""Stable Record - extensible SSZ records with capacity-padded Merkle roots."""
from .evolution import check_extension, upgrade
from .merkleizer import FieldProof, verify_field_proof
from .plan import ABSENT, Absent, FieldDescriptor, FieldPlan, Present, optional, required
from .record import RecordValue, StableRecordType

__all__ = [
    "ABSENT", "Absent", "Present", "FieldDescriptor", "FieldPlan", "optional", "required",
    "StableRecordType", "RecordValue", "FieldProof", "verify_field_proof",
    "check_extension", "upgrade",
]
