from datetime import date
from decimal import Decimal
from typing import Union
from pydantic import BaseModel, Field, ConfigDict

class Entity(BaseModel):
    """
    Immutable identity-bearing record stored in a Repository.
    Subclasses narrow the id type and add their domain fields.
    """
    # Enforces immutability: once created, fields cannot be modified.
    # A stored entity changes only by being replaced with a validated copy.
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: Union[int, str] = Field(..., description="Identity, unique within one repository")


class InventoryItem(Entity):
    """A stock record in the inventory log."""
    id: int = Field(..., description="Inventory record id")
    name: str = Field(..., min_length=1, description="Display name of the item")
    quantity: int = Field(..., ge=0, description="Units on hand")
    date_added: date = Field(..., description="Calendar date the record was created")

    def __str__(self) -> str:
        return f"{self.id}: {self.name} (Qty: {self.quantity}) Added: {self.date_added.isoformat()}"


class ElectronicItem(Entity):
    id: int
    name: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=0)
    brand: str = Field(..., min_length=1)
    warranty_months: int = Field(..., ge=0)

    def __str__(self) -> str:
        return (
            f"ElectronicItem(Id={self.id}, Name={self.name}, Qty={self.quantity}, "
            f"Brand={self.brand}, Warranty={self.warranty_months}mo)"
        )


class GroceryItem(Entity):
    id: int
    name: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=0)
    expiry_date: date

    def __str__(self) -> str:
        return (
            f"GroceryItem(Id={self.id}, Name={self.name}, Qty={self.quantity}, "
            f"Expiry={self.expiry_date.isoformat()})"
        )


class Patient(Entity):
    id: int
    name: str = Field(..., min_length=1)
    age: int = Field(..., ge=0)
    gender: str = Field(..., min_length=1)

    def __str__(self) -> str:
        return f"Patient(Id={self.id}, Name={self.name}, Age={self.age}, Gender={self.gender})"


class Prescription(Entity):
    """A medication issued to a patient; grouped by ``patient_id``."""
    id: int
    patient_id: int = Field(..., description="Id of the Patient this prescription belongs to")
    medication_name: str = Field(..., min_length=1)
    date_issued: date

    def __str__(self) -> str:
        return (
            f"Prescription(Id={self.id}, PatientId={self.patient_id}, "
            f"Medication={self.medication_name}, Date={self.date_issued.isoformat()})"
        )


class Student(Entity):
    id: int
    full_name: str = Field(..., min_length=1)
    score: int = Field(..., ge=0, le=100)

    @property
    def grade(self) -> str:
        if self.score >= 80:
            return "A"
        if self.score >= 70:
            return "B"
        if self.score >= 60:
            return "C"
        if self.score >= 50:
            return "D"
        return "F"

    def __str__(self) -> str:
        return f"{self.full_name} (ID: {self.id}): Score = {self.score}, Grade = {self.grade}"


class Transaction(Entity):
    """
    A ledger entry. ``amount`` is a Decimal so it round-trips through the
    persisted file as a decimal literal rather than a float.
    """
    id: int
    posted_on: date = Field(..., description="Calendar date the transaction was posted")
    amount: Decimal
    category: str = Field(..., min_length=1)

    def __str__(self) -> str:
        return (
            f"Transaction(Id={self.id}, Date={self.posted_on.isoformat()}, "
            f"Amount={self.amount}, Category={self.category})"
        )
