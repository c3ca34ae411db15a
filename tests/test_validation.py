"""Tests for the shared patient validation rules"""

from datetime import date

import pytest

from patient_manager.domains.patient.validation import (
    earliest_date_of_birth,
    parse_date_of_birth,
    validate_patient,
    validate_patient_fields,
    validate_patient_id,
)

from conftest import make_patient

TODAY = date(2024, 6, 15)


class TestValidatePatient:
    """Record-level rules"""

    def test_valid_record_has_no_errors(self):
        assert validate_patient(make_patient(), today=TODAY) == []

    def test_middle_name_is_optional(self):
        assert validate_patient(make_patient(middleName=None), today=TODAY) == []
        assert validate_patient(make_patient(middleName="   "), today=TODAY) == []

    def test_invalid_middle_name_is_reported(self):
        errors = validate_patient(make_patient(middleName="J3"), today=TODAY)
        assert errors == ["Middle name must contain only letters and spaces"]

    @pytest.mark.parametrize("field,message", [
        ("firstName", "First name is required"),
        ("lastName", "Last name is required"),
        ("dob", "Date of birth is required"),
        ("status", "Status is required"),
    ])
    def test_missing_top_level_field(self, field, message):
        errors = validate_patient(make_patient(**{field: ""}), today=TODAY)
        assert errors == [message]

    @pytest.mark.parametrize("field,message", [
        ("street", "Street address is required"),
        ("city", "City is required"),
        ("state", "State is required"),
        ("zip", "Zip code is required"),
    ])
    def test_missing_address_field(self, field, message):
        errors = validate_patient(make_patient(address={field: "  "}), today=TODAY)
        assert errors == [message]

    def test_missing_address_reports_every_part(self):
        record = make_patient()
        record["address"] = None

        assert validate_patient(record, today=TODAY) == [
            "Street address is required",
            "City is required",
            "State is required",
            "Zip code is required",
        ]

    def test_all_violations_are_collected(self):
        record = make_patient(firstName="J4ne", status="Pending", address={"zip": "123"})
        errors = validate_patient(record, today=TODAY)

        assert errors == [
            "First name must contain only letters and spaces",
            "Status must be one of: Inquiry, Onboarding, Active, Churned",
            "Zip code must be exactly 5 digits",
        ]

    @pytest.mark.parametrize("zip_code", ["123", "123456", "12a45", "12345\n", "12 45"])
    def test_zip_must_be_five_digits(self, zip_code):
        errors = validate_patient(make_patient(address={"zip": zip_code}), today=TODAY)
        assert errors == ["Zip code must be exactly 5 digits"]

    def test_names_allow_spaces(self):
        assert validate_patient(make_patient(firstName="Mary Ann", lastName="Van Dyke"), today=TODAY) == []

    def test_hyphenated_name_is_rejected(self):
        errors = validate_patient(make_patient(lastName="Smith-Jones"), today=TODAY)
        assert errors == ["Last name must contain only letters and spaces"]

    def test_street_punctuation(self):
        record = make_patient(address={"street": "12-B O'Neil Ave., Apt #4/5"})
        assert validate_patient(record, today=TODAY) == []

        record = make_patient(address={"street": "1 Main St; DROP"})
        assert validate_patient(record, today=TODAY) == ["Street address contains invalid characters"]

    def test_city_and_state_characters(self):
        record = make_patient(address={"city": "St. John's", "state": "N.Y."})
        assert validate_patient(record, today=TODAY) == []

        record = make_patient(address={"city": "Area 51", "state": "IL!"})
        assert validate_patient(record, today=TODAY) == [
            "City contains invalid characters",
            "State contains invalid characters",
        ]


class TestDateOfBirth:
    """Date of birth window"""

    def test_future_date_rejected(self):
        errors = validate_patient(make_patient(dob="2024-06-16"), today=TODAY)
        assert errors == ["Date of birth cannot be in the future"]

    def test_today_is_accepted(self):
        assert validate_patient(make_patient(dob="2024-06-15"), today=TODAY) == []

    def test_more_than_150_years_rejected(self):
        errors = validate_patient(make_patient(dob="1874-06-14"), today=TODAY)
        assert errors == ["Date of birth cannot be more than 150 years in the past"]

    def test_exactly_150_years_accepted(self):
        assert validate_patient(make_patient(dob="1874-06-15"), today=TODAY) == []

    def test_unparseable_date(self):
        errors = validate_patient(make_patient(dob="not-a-date"), today=TODAY)
        assert errors == ["Date of birth must be a valid date"]

    def test_iso_datetime_accepted(self):
        assert validate_patient(make_patient(dob="1990-01-01T00:00:00"), today=TODAY) == []

    def test_parse_date_of_birth(self):
        assert parse_date_of_birth("1990-01-01") == date(1990, 1, 1)
        assert parse_date_of_birth(date(1990, 1, 1)) == date(1990, 1, 1)
        assert parse_date_of_birth("") is None
        assert parse_date_of_birth(None) is None
        assert parse_date_of_birth("1990-13-01") is None

    def test_earliest_date_rolls_leap_day_forward(self):
        assert earliest_date_of_birth(date(2024, 2, 29)) == date(1874, 3, 1)
        assert earliest_date_of_birth(TODAY) == date(1874, 6, 15)

    def test_leap_day_cutoff(self):
        leap_day = date(2024, 2, 29)

        assert validate_patient(make_patient(dob="1874-03-01"), today=leap_day) == []
        assert validate_patient(make_patient(dob="1874-02-28"), today=leap_day) == [
            "Date of birth cannot be more than 150 years in the past"
        ]


class TestFieldErrors:
    """Per-field feedback for the dashboard form"""

    def test_first_message_per_field(self):
        record = make_patient(firstName="", lastName="D0e", address={"zip": "1"})
        errors = validate_patient_fields(record, today=TODAY)

        assert errors == {
            "firstName": "First name is required",
            "lastName": "Last name must contain only letters and spaces",
            "zip": "Zip code must be exactly 5 digits",
        }

    def test_valid_record_has_no_field_errors(self):
        assert validate_patient_fields(make_patient(), today=TODAY) == {}


class TestPatientId:
    """Identifier format"""

    @pytest.mark.parametrize("value", [1, "1", "42", " 7 "])
    def test_positive_integers_accepted(self, value):
        assert validate_patient_id(value) == []

    @pytest.mark.parametrize("value", ["0", "-1", "abc", "1.5", "", None])
    def test_invalid_ids_rejected(self, value):
        assert validate_patient_id(value) == ["Patient ID must be a positive integer"]
