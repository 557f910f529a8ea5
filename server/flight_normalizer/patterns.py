# patterns.py
import re


class Patterns:
    # "09:45", "09:45AM", "9:45 a.m. -03", "Thu 21:10 +02"
    CLOCK = re.compile(
        r"(?P<hour>\d{1,2}):(?P<minute>\d{2})"
        r"(?:\s*(?P<meridiem>[AaPp])\.?(?:[Mm]\.?)?(?![A-Za-z]))?"
        r"(?:\s+(?P<offset>[+-]?\d{1,2})(?![\d:]))?"
    )
    # "23-Jul-2025", "5 mai 2024", "05/Fev/2024"
    DATE_DMY = re.compile(r"\b(?P<day>\d{1,2})[-/ ](?P<month>[A-Za-z]{3})[-/ ](?P<year>\d{4})\b")
    ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
    DURATION = re.compile(r"^\s*(?P<hours>\d+):(?P<minutes>[0-5]\d)\s*$")
    DECORATIONS = re.compile(r"First seen |Last seen |\(\?\)")


patterns = Patterns()
