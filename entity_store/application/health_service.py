import logging
from datetime import date, timedelta
from operator import attrgetter
from typing import List, Optional

from entity_store.application.reporting import render_items
from entity_store.domain.index import GroupIndex
from entity_store.domain.models import Patient, Prescription
from entity_store.domain.repository import Repository

logger = logging.getLogger(__name__)


class HealthSystem:
    """Patients, their prescriptions, and a per-patient prescription map."""

    def __init__(self, today: Optional[date] = None):
        self.today = today or date.today()
        self.patients: Repository[Patient] = Repository(name="patients")
        self.prescriptions: Repository[Prescription] = Repository(name="prescriptions")
        self.prescription_map: GroupIndex[int, Prescription] = GroupIndex(key=attrgetter("patient_id"))

    def _days_ago(self, days: int) -> date:
        return self.today - timedelta(days=days)

    def seed_data(self) -> None:
        self.patients.add(Patient(id=1, name="Alice Johnson", age=34, gender="Female"))
        self.patients.add(Patient(id=2, name="Bob Mensah", age=45, gender="Male"))
        self.patients.add(Patient(id=3, name="Clara Osei", age=29, gender="Female"))

        self.prescriptions.add(Prescription(id=1, patient_id=1, medication_name="Amoxicillin 500mg", date_issued=self._days_ago(10)))
        self.prescriptions.add(Prescription(id=2, patient_id=1, medication_name="Paracetamol 500mg", date_issued=self._days_ago(3)))
        self.prescriptions.add(Prescription(id=3, patient_id=2, medication_name="Lisinopril 10mg", date_issued=self._days_ago(30)))
        self.prescriptions.add(Prescription(id=4, patient_id=3, medication_name="Metformin 500mg", date_issued=self._days_ago(7)))
        self.prescriptions.add(Prescription(id=5, patient_id=2, medication_name="Atorvastatin 20mg", date_issued=self._days_ago(1)))
        logger.info(f"Seeded {len(self.patients)} patients and {len(self.prescriptions)} prescriptions.")

    def build_prescription_map(self) -> None:
        self.prescription_map.rebuild(self.prescriptions)

    def prescriptions_for(self, patient_id: int) -> List[Prescription]:
        """Most recent first. Rebuild the map after mutating prescriptions."""
        return self.prescription_map.lookup(patient_id, sort_by=attrgetter("date_issued"), descending=True)

    def patient_report(self, patient_id: int) -> List[str]:
        patient = self.patients.find_first(lambda p: p.id == patient_id)
        if patient is None:
            return [f"No patient found with Id {patient_id}"]
        return render_items(f"Prescriptions for {patient.name} (Id={patient.id})", self.prescriptions_for(patient_id))
