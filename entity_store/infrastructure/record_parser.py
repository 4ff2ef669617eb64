import logging
from typing import Iterable, List

from entity_store.domain.exceptions import (
    DeserializationException,
    IOFailureException,
    InvalidScoreFormatException,
    MissingFieldException,
)
from entity_store.domain.models import Student

logger = logging.getLogger(__name__)

MIN_SCORE = 0
MAX_SCORE = 100


class StudentRecordTranslator:
    """
    Translates comma-separated text records (``Id, FullName, Score``) into
    Student entities.

    The first malformed line aborts the whole batch; no partial result is
    returned.
    """

    @staticmethod
    def to_domain(line: str, line_number: int) -> Student:
        """
        Parses a single non-blank line.

        The first token is the id and the last is the score; everything in
        between is the full name, so names may themselves contain commas.
        """
        parts = line.split(',')
        if len(parts) < 3:
            raise MissingFieldException(
                line_number,
                f"Missing field(s). Expected format 'Id, FullName, Score'. Line contents: '{line}'",
            )

        id_token = parts[0].strip()
        score_token = parts[-1].strip()
        full_name = ",".join(parts[1:-1]).strip()

        try:
            student_id = int(id_token)
        except ValueError:
            raise MissingFieldException(line_number, f"Invalid or missing ID value ('{id_token}').") from None

        try:
            score = int(score_token)
        except ValueError:
            raise InvalidScoreFormatException(line_number, f"Score '{score_token}' is not a valid integer.") from None

        if score < MIN_SCORE or score > MAX_SCORE:
            raise InvalidScoreFormatException(
                line_number, f"Score '{score}' is out of valid range ({MIN_SCORE}-{MAX_SCORE})."
            )

        if not full_name:
            raise MissingFieldException(line_number, "FullName is missing or empty.")

        return Student(id=student_id, full_name=full_name, score=score)

    @classmethod
    def parse_lines(cls, lines: Iterable[str]) -> List[Student]:
        students = []
        for line_number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            students.append(cls.to_domain(line.rstrip("\r\n"), line_number))
        return students

    @classmethod
    def read_file(cls, path: str) -> List[Student]:
        """
        Reads every record of a text file.

        Raises:
            IOFailureException: if the file is missing or unreadable.
            DeserializationException: if the file is not valid UTF-8.
            MissingFieldException, InvalidScoreFormatException: on the first bad line.
        """
        try:
            with open(path, "rb") as f:
                raw = f.read()
        except OSError as exc:
            logger.error(f"Could not read student records from {path}: {exc}")
            raise IOFailureException(path, f"Could not read records: {exc.strerror or exc}") from exc

        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            logger.error(f"Student records in {path} are not valid UTF-8: {exc.reason} at byte {exc.start}")
            raise DeserializationException(path, f"Invalid UTF-8: {exc.reason}", location=f"byte {exc.start}") from exc

        students = cls.parse_lines(text.splitlines())
        logger.info(f"Read {len(students)} valid student record(s) from {path}.")
        return students
