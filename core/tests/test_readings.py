from datetime import date, time

from django.contrib.auth import get_user_model
from django.test import TestCase

from core.exceptions import ValidationError
from core.models import AuditEvent, BibleChapter, BibleReading, Service, ServiceType
from core.services.readings import (
    bible_books,
    confirm_repeated_reading,
    filter_readings,
    format_citation,
    save_reading,
    validate_reading_range,
)


class SaveReadingTests(TestCase):
    def setUp(self):
        self.reader = get_user_model().objects.create_user(email="reader@example.com", password="pass", pulpit=True)
        self.service_type = ServiceType.objects.create(name="Culto general", requires_intro_reading=True)
        self.first = Service.objects.create(date=date(2025, 3, 2), start_time=time(19, 0), service_type=self.service_type)
        self.second = Service.objects.create(date=date(2025, 3, 9), start_time=time(19, 0), service_type=self.service_type)

    def test_saves_new_reading(self):
        outcome = save_reading(self.first, "intro", "Salmos", 23, 1, 23, 6, self.reader)

        self.assertFalse(outcome.requires_confirmation)
        self.assertEqual(format_citation(outcome.reading), "Salmos 23:1-23:6")
        self.assertTrue(AuditEvent.objects.filter(action_type="reading_create", service=self.first).exists())

    def test_missing_end_defaults_to_start(self):
        outcome = save_reading(self.first, "closing", "Juan", 3, 16, None, None, self.reader)

        reading = outcome.reading
        self.assertEqual((reading.chapter_end, reading.verse_end), (3, 16))
        self.assertEqual(format_citation(reading), "Juan 3:16")

    def test_repeated_citation_requires_confirmation(self):
        first = save_reading(self.first, "intro", "Salmos", 23, 1, 23, 6, self.reader).reading

        outcome = save_reading(self.second, "intro", "Salmos", 23, 1, 23, 6, self.reader)

        self.assertTrue(outcome.requires_confirmation)
        self.assertEqual(outcome.existing, first)
        self.assertEqual(BibleReading.objects.count(), 1)

    def test_confirming_repeated_reading_links_original(self):
        first = save_reading(self.first, "intro", "Salmos", 23, 1, 23, 6, self.reader).reading

        repeated = confirm_repeated_reading(self.second, "intro", "Salmos", 23, 1, 23, 6, self.reader, first)

        self.assertTrue(repeated.is_repeated)
        self.assertEqual(repeated.original_reading, first)
        self.assertEqual(list(first.repetitions.all()), [repeated])
        self.assertTrue(AuditEvent.objects.filter(action_type="reading_repeated").exists())

    def test_invalid_range_is_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            save_reading(self.first, "intro", "Salmos", 23, 6, 22, 1, self.reader)
        self.assertEqual(ctx.exception.field, "chapter_end")

    def test_reversed_verses_without_end_chapter_are_rejected(self):
        self.assertIn("verse_end", validate_reading_range("Juan", 3, 16, None, 10))

        with self.assertRaises(ValidationError) as ctx:
            save_reading(self.first, "intro", "Juan", 3, 16, None, 10, self.reader)
        self.assertEqual(ctx.exception.field, "verse_end")
        self.assertFalse(BibleReading.objects.exists())

    def test_invalid_reading_type_is_rejected(self):
        with self.assertRaises(ValidationError):
            save_reading(self.first, "sermon", "Salmos", 23, 1, 23, 6, self.reader)

    def test_validate_reading_range_reports_fields(self):
        errors = validate_reading_range("", 0, 0)

        self.assertEqual(set(errors), {"book", "chapter_start", "verse_start"})
        self.assertEqual(validate_reading_range("Juan", 3, 16, 3, 10), {"verse_end": "El versículo final no puede ser menor al inicial"})

    def test_filter_readings(self):
        first = save_reading(self.first, "intro", "Salmos", 23, 1, 23, 6, self.reader).reading
        confirm_repeated_reading(self.second, "intro", "Salmos", 23, 1, 23, 6, self.reader, first)
        save_reading(self.second, "closing", "Juan", 3, 16, None, None, self.reader)

        self.assertEqual(filter_readings(only_repeated=True).count(), 1)
        self.assertEqual(filter_readings(reading_type="closing").count(), 1)
        self.assertEqual(filter_readings(start_date=date(2025, 3, 5)).count(), 2)
        self.assertEqual(filter_readings(end_date=date(2025, 3, 5)).count(), 1)


class BibleBooksTests(TestCase):
    def test_groups_chapters_by_book(self):
        BibleChapter.objects.create(book="Génesis", testament="AT", abbreviation="Gn", book_order=1, chapter=1, verse_count=31)
        BibleChapter.objects.create(book="Génesis", testament="AT", abbreviation="Gn", book_order=1, chapter=2, verse_count=25)
        BibleChapter.objects.create(book="Juan", testament="NT", abbreviation="Jn", book_order=43, chapter=1, verse_count=51)

        books = bible_books()

        self.assertEqual([book["name"] for book in books], ["Génesis", "Juan"])
        self.assertEqual(books[0]["chapters"], [{"n": 1, "v": 31}, {"n": 2, "v": 25}])
        self.assertEqual([book["name"] for book in bible_books("jn")], ["Juan"])
