"""Tests for the form validation rules."""

from datetime import date, timedelta

import pytest

from elevator_platform.roles import Role
from elevator_platform.ui_logic.validation_manager import (
    ValidationError,
    ValidationResult,
    parse_date,
    validate_elevator,
    validate_elevator_part,
    validate_filters,
    validate_forgot_password,
    validate_login,
    validate_profile,
    validate_register,
    validate_reset_password,
)

TODAY = date(2024, 6, 15)


def _register_values(**overrides):
    values = {
        "email": "ivan@example.com",
        "password": "secret1",
        "confirm_password": "secret1",
        "role": "company",
        "full_name": "Ivan Petrov",
        "phone": "+359 888 123 456",
        "company_name": "Lift Ltd",
        "company_address": "1 Vitosha Blvd, Sofia",
        "tax_id": "123456789",
    }
    values.update(overrides)
    return values


def _elevator_values(**overrides):
    values = {
        "serial_number": "SN-001",
        "model": "Otis Gen2",
        "capacity": 630,
        "status": "operational",
        "installation_date": date(2015, 3, 1),
        "last_inspection_date": date(2024, 1, 10),
        "next_inspection_date": date(2024, 12, 1),
        "building_id": "b1",
    }
    values.update(overrides)
    return values


class TestValidationResult:
    def test_field_errors_keeps_first_message_per_field(self):
        result = ValidationResult()
        result.add_error("email", "Email is required")
        result.add_error("email", "Invalid email address")
        result.add_error("password", "Password is required")
        assert not result.is_valid
        assert result.field_errors() == {"email": "Email is required", "password": "Password is required"}
        assert result.first_message() == "Email is required"
        assert result.get_errors_by_field("email")[1] == ValidationError("email", "Invalid email address")

    def test_empty_result_is_valid(self):
        result = ValidationResult()
        assert result.is_valid
        assert result.to_dict() == {"is_valid": True, "errors": []}


class TestAuthForms:
    def test_login_requires_valid_email_and_password(self):
        result = validate_login("not-an-email", "")
        assert set(result.field_errors()) == {"email", "password"}
        assert validate_login("ivan@example.com", "x").is_valid

    def test_forgot_password_empty_email(self):
        result = validate_forgot_password("   ")
        assert result.field_errors() == {"email": "Email is required"}

    @pytest.mark.parametrize(
        "password, confirm, field",
        [
            ("", "", "password"),
            ("Ab1!", "Ab1!", "password"),
            ("abcdefgh1!", "abcdefgh1!", "password"),
            ("Abcdefg1!", "", "confirm_password"),
            ("Abcdefg1!", "Abcdefg1?", "confirm_password"),
        ],
    )
    def test_reset_password_rules(self, password, confirm, field):
        assert field in validate_reset_password(password, confirm).field_errors()

    def test_reset_password_strong_password_passes(self):
        assert validate_reset_password("Abcdefg1!", "Abcdefg1!").is_valid


class TestRegister:
    def test_valid_company(self):
        assert validate_register(_register_values()).is_valid

    def test_password_rules(self):
        errors = validate_register(_register_values(password="abc", confirm_password="abd")).field_errors()
        assert "password" in errors
        assert errors["confirm_password"] == "Passwords do not match"

    def test_internal_roles_cannot_register(self):
        assert "role" in validate_register(_register_values(role="admin")).field_errors()

    def test_phone_pattern(self):
        assert "phone" in validate_register(_register_values(phone="12-34")).field_errors()

    def test_company_requires_fields_and_numeric_tax_id(self):
        errors = validate_register(_register_values(company_address="", tax_id="12AB")).field_errors()
        assert "company_name" in errors
        assert errors["tax_id"] == "Tax ID must be 9 to 13 digits"

    def test_technician_requires_numeric_experience(self):
        values = _register_values(role="technician", specialization="Hydraulics", experience="five")
        assert validate_register(values).field_errors() == {"experience": "Enter a valid number of years"}
        values["experience"] = "5"
        assert validate_register(values).is_valid

    def test_building_manager_requires_address_and_count(self):
        values = _register_values(role="building_manager")
        assert "building_address" in validate_register(values).field_errors()
        values.update(building_address="5 Rakovski St", apartments_count="24")
        assert validate_register(values).is_valid


class TestProfile:
    def test_empty_fields_are_accepted(self):
        assert validate_profile(Role.COMPANY, {"full_name": "", "company_name": None}).is_valid

    def test_length_limits(self):
        errors = validate_profile(
            Role.COMPANY,
            {"full_name": "A", "phone": "1" * 21, "company_address": "x" * 201},
        ).field_errors()
        assert set(errors) == {"full_name", "phone", "company_address"}

    def test_only_fields_of_the_role_are_checked(self):
        values = {"building_info": "x" * 600}
        assert validate_profile(Role.COMPANY, values).is_valid
        assert not validate_profile(Role.BUILDING_MANAGER, values).is_valid


class TestElevator:
    def test_valid_values(self):
        assert validate_elevator(_elevator_values(), today=TODAY).is_valid

    def test_serial_and_model_are_trimmed_before_length_check(self):
        errors = validate_elevator(_elevator_values(serial_number="  A ", model=" " * 5), today=TODAY).field_errors()
        assert set(errors) == {"serial_number", "model"}

    @pytest.mark.parametrize("capacity", [0, 5001, "abc", None])
    def test_capacity_bounds(self, capacity):
        assert "capacity" in validate_elevator(_elevator_values(capacity=capacity), today=TODAY).field_errors()

    def test_dates_before_2000_or_in_future(self):
        errors = validate_elevator(
            _elevator_values(installation_date=date(1999, 12, 31), last_inspection_date=TODAY + timedelta(days=1)),
            today=TODAY,
        ).field_errors()
        assert set(errors) == {"installation_date", "last_inspection_date"}

    def test_next_inspection_must_be_today_or_later(self):
        errors = validate_elevator(
            _elevator_values(next_inspection_date=TODAY - timedelta(days=1)), today=TODAY
        ).field_errors()
        assert "next_inspection_date" in errors
        assert validate_elevator(_elevator_values(next_inspection_date=TODAY), today=TODAY).is_valid

    def test_next_inspection_after_last(self):
        values = _elevator_values(last_inspection_date=TODAY, next_inspection_date=TODAY)
        errors = validate_elevator(values, today=TODAY).field_errors()
        assert errors["next_inspection_date"] == "Next inspection must be after the last inspection"

    def test_missing_dates_are_required(self):
        errors = validate_elevator(_elevator_values(installation_date=None), today=TODAY).field_errors()
        assert errors["installation_date"] == "Installation date is required"

    def test_iso_strings_accepted(self):
        values = _elevator_values(installation_date="2015-03-01", next_inspection_date="2024-12-01T00:00:00")
        assert validate_elevator(values, today=TODAY).is_valid

    def test_new_building_needs_name_and_address(self):
        values = _elevator_values(building_id="", building_name="A", building_address="Sofia")
        assert "building_id" in validate_elevator(values, today=TODAY).field_errors()
        values.update(building_name="Block 12", building_address="12 Vitosha Blvd")
        assert validate_elevator(values, today=TODAY).is_valid

    def test_invalid_status(self):
        assert "status" in validate_elevator(_elevator_values(status="broken"), today=TODAY).field_errors()


class TestPartAndFilters:
    def test_part_name_required_and_bounded(self):
        assert "name" in validate_elevator_part({"name": "  "}).field_errors()
        assert "name" in validate_elevator_part({"name": "x" * 256}).field_errors()
        assert validate_elevator_part({"name": "Door motor"}).is_valid

    def test_part_status_and_dates(self):
        errors = validate_elevator_part(
            {"name": "Cable", "status": "broken", "installation_date": "31/12/2020"}
        ).field_errors()
        assert set(errors) == {"status", "installation_date"}

    def test_filters(self):
        assert validate_filters("A12", "all").is_valid
        assert validate_filters(None, "maintenance").is_valid
        assert "status" in validate_filters("", "deleted").field_errors()

    def test_parse_date(self):
        assert parse_date("") is None
        assert parse_date("2024-02-29") == date(2024, 2, 29)
        with pytest.raises(ValueError):
            parse_date("tomorrow")
