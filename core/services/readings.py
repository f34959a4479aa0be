from dataclasses import dataclass

from django.db.models import Q

from core.exceptions import ValidationError
from core.models import BibleChapter, BibleReading
from core.services.audit import log_audit


@dataclass
class ReadingOutcome:
    reading: BibleReading = None
    existing: BibleReading = None

    @property
    def requires_confirmation(self):
        return self.reading is None and self.existing is not None


def validate_reading_range(book, chapter_start, verse_start, chapter_end=None, verse_end=None):
    errors = {}
    if not book or not book.strip():
        errors["book"] = "El libro es requerido"
    if not chapter_start or chapter_start < 1:
        errors["chapter_start"] = "El capítulo de inicio debe ser mayor a 0"
    if not verse_start or verse_start < 1:
        errors["verse_start"] = "El versículo de inicio debe ser mayor a 0"
    if chapter_end and chapter_start and chapter_end < chapter_start:
        errors["chapter_end"] = "El capítulo final no puede ser menor al inicial"
    if verse_end and verse_start and (chapter_end or chapter_start) == chapter_start and verse_end < verse_start:
        errors["verse_end"] = "El versículo final no puede ser menor al inicial"
    return errors


def _normalized_range(book, chapter_start, verse_start, chapter_end, verse_end):
    errors = validate_reading_range(book, chapter_start, verse_start, chapter_end, verse_end)
    if errors:
        field_name, message = next(iter(errors.items()))
        raise ValidationError(message, field=field_name)
    return book.strip(), chapter_start, verse_start, chapter_end or chapter_start, verse_end or verse_start


def find_existing_reading(book, chapter_start, verse_start, chapter_end, verse_end):
    return (
        BibleReading.objects.filter(
            book=book,
            chapter_start=chapter_start,
            verse_start=verse_start,
            chapter_end=chapter_end,
            verse_end=verse_end,
            is_repeated=False,
        )
        .select_related("service", "reader")
        .order_by("registered_at", "id")
        .first()
    )


def _create_reading(service, reading_type, citation, reader, is_repeated=False, original=None):
    book, chapter_start, verse_start, chapter_end, verse_end = citation
    if reading_type not in dict(BibleReading.TYPE_CHOICES):
        raise ValidationError("Tipo de lectura no válido.", field="reading_type")
    return BibleReading.objects.create(
        service=service,
        reading_type=reading_type,
        book=book,
        chapter_start=chapter_start,
        verse_start=verse_start,
        chapter_end=chapter_end,
        verse_end=verse_end,
        reader=reader,
        is_repeated=is_repeated,
        original_reading=original,
    )


def save_reading(service, reading_type, book, chapter_start, verse_start, chapter_end, verse_end, reader, actor=None):
    """Save a reading unless the same citation was already read.

    A citation read before is not saved; the outcome carries the earlier
    reading so the caller can ask for confirmation and then use
    ``confirm_repeated_reading``.
    """
    citation = _normalized_range(book, chapter_start, verse_start, chapter_end, verse_end)
    existing = find_existing_reading(*citation)
    if existing:
        return ReadingOutcome(existing=existing)
    reading = _create_reading(service, reading_type, citation, reader)
    log_audit(
        actor,
        "BibleReading",
        reading.id,
        "reading_create",
        {"citation": format_citation(reading)},
        description=f"Lectura de {reading.get_reading_type_display().lower()} registrada",
        service=service,
    )
    return ReadingOutcome(reading=reading)


def confirm_repeated_reading(
    service, reading_type, book, chapter_start, verse_start, chapter_end, verse_end, reader, original, actor=None
):
    citation = _normalized_range(book, chapter_start, verse_start, chapter_end, verse_end)
    reading = _create_reading(service, reading_type, citation, reader, is_repeated=True, original=original)
    log_audit(
        actor,
        "BibleReading",
        reading.id,
        "reading_repeated",
        {"citation": format_citation(reading), "original_id": original.id if original else None},
        description="Lectura repetida confirmada",
        service=service,
    )
    return reading


def readings_for_service(service):
    return (
        BibleReading.objects.filter(service=service)
        .select_related("reader", "original_reading__service")
        .order_by("reading_type", "registered_at")
    )


def filter_readings(start_date=None, end_date=None, service_type_id=None, reading_type=None, only_repeated=False):
    qs = BibleReading.objects.select_related("service__service_type", "reader").order_by("-registered_at", "-id")
    if only_repeated:
        qs = qs.filter(is_repeated=True)
    if reading_type:
        qs = qs.filter(reading_type=reading_type)
    if start_date:
        qs = qs.filter(service__date__gte=start_date)
    if end_date:
        qs = qs.filter(service__date__lte=end_date)
    if service_type_id:
        qs = qs.filter(service__service_type_id=service_type_id)
    return qs


def format_citation(reading):
    label = f"{reading.book} {reading.chapter_start}:{reading.verse_start}"
    if reading.chapter_end != reading.chapter_start or reading.verse_end != reading.verse_start:
        label = f"{label}-{reading.chapter_end}:{reading.verse_end}"
    return label


def bible_books(query=None):
    rows = BibleChapter.objects.order_by("book_order", "chapter")
    if query:
        rows = rows.filter(Q(book__icontains=query) | Q(abbreviation__iexact=query))
    books = {}
    for row in rows:
        book = books.get(row.book)
        if book is None:
            book = {
                "id": len(books) + 1,
                "name": row.book,
                "testament": row.testament,
                "abbreviation": row.abbreviation,
                "chapters": [],
            }
            books[row.book] = book
        book["chapters"].append({"n": row.chapter, "v": row.verse_count})
    return list(books.values())
