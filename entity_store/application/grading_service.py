import logging
from typing import List

from entity_store.domain.models import Student
from entity_store.domain.repository import Repository
from entity_store.infrastructure.json_store import write_atomically
from entity_store.infrastructure.record_parser import StudentRecordTranslator

logger = logging.getLogger(__name__)


class GradingService:
    """
    Reads a batch of student records, stores them, and writes a grade report.
    Any bad record, including a repeated id, fails the whole batch and leaves
    the repository untouched.
    """

    def __init__(self):
        self.students: Repository[Student] = Repository(name="students")

    def load_students(self, input_path: str) -> List[Student]:
        parsed = StudentRecordTranslator.read_file(input_path)

        batch: Repository[Student] = Repository(name="students-batch")
        batch.extend(parsed)

        self.students.clear()
        self.students.extend(batch.get_all())
        return self.students.get_all()

    def report_lines(self) -> List[str]:
        return [str(student) for student in self.students.get_all()]

    def write_report(self, output_path: str) -> None:
        lines = self.report_lines()
        payload = "".join(f"{line}\n" for line in lines).encode("utf-8")
        write_atomically(output_path, payload)
        logger.info(f"Wrote report for {len(lines)} student(s) to {output_path}.")
