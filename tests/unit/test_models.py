"""
Unit tests for the contract data models and the result models' JSON shapes.
"""

import unittest
from types import MappingProxyType

from mismo_ldd.models import EnumMap, FieldMapping, RequiredIfCondition, SchemaPack
from mismo_ldd.validation.validation_models import (
    CoverageReport,
    MappingIssue,
    PackValidationReport,
    ValidationCategory,
    ValidationIssue,
    ValidationSeverity,
    WellFormedResult,
)


class TestRequiredIfCondition(unittest.TestCase):

    def test_from_dict_detects_operator(self):
        condition = RequiredIfCondition.from_dict({"field": "vesting_type", "in_values": ["LLC", "Trust"]})

        self.assertEqual(condition.operator, "in_values")
        self.assertEqual(condition.operand, ("LLC", "Trust"))
        self.assertEqual(condition.to_dict(), {"field": "vesting_type", "in_values": ["LLC", "Trust"]})

    def test_missing_operator_is_rejected(self):
        with self.assertRaises(ValueError):
            RequiredIfCondition.from_dict({"field": "vesting_type"})

    def test_unknown_operator_is_rejected(self):
        with self.assertRaises(ValueError):
            RequiredIfCondition("vesting_type", "greater_than", 3)


class TestFieldMapping(unittest.TestCase):

    def test_enum_mapping_requires_enum_type(self):
        with self.assertRaises(ValueError):
            FieldMapping(name="loan_purpose", mismo_path="LOAN/TERMS_OF_LOAN/LoanPurposeType", datatype="Enum")

    def test_empty_path_is_rejected(self):
        with self.assertRaises(ValueError):
            FieldMapping(name="loan_amount", mismo_path="", datatype="Amount")

    def test_contract_form_round_trip(self):
        data = {
            "mismoPath": "PARTY/TAXPAYER_IDENTIFIERS/TAXPAYER_IDENTIFIER/TaxpayerIdentifierValue",
            "datatype": "SSN",
            "required": False,
            "sensitive": True,
        }
        mapping = FieldMapping.from_dict("ssn_encrypted", data)

        self.assertTrue(mapping.sensitive)
        self.assertEqual(mapping.to_dict(), data)


class TestEnumMap(unittest.TestCase):

    def setUp(self):
        self.enum_map = EnumMap(
            enum_type="BorrowerResidencyBasisType",
            internal_to_mismo=MappingProxyType({"Own": "Own", "Rent Free": "LivingRentFree", "true": "Own"}),
            mismo_values=("LivingRentFree", "Own", "Rent"),
        )

    def test_translate(self):
        self.assertEqual(self.enum_map.translate("Rent Free"), "LivingRentFree")
        self.assertIsNone(self.enum_map.translate("Boat"))

    def test_boolean_keys(self):
        self.assertEqual(EnumMap.lookup_key(True), "true")
        self.assertEqual(EnumMap.lookup_key(False), "false")
        self.assertEqual(self.enum_map.translate(True), "Own")

    def test_is_mismo_value_requires_text(self):
        self.assertTrue(self.enum_map.is_mismo_value("Rent"))
        self.assertFalse(self.enum_map.is_mismo_value(None))


class TestSchemaPack(unittest.TestCase):

    def test_root_element_is_required(self):
        with self.assertRaises(ValueError):
            SchemaPack(pack_id="PACK_X", name="x", description="", mismo_version="3.4.0", build="324",
                       ldd_identifier="urn:x", pack_hash="", root_element="")


class TestResultShapes(unittest.TestCase):

    def _issue(self, severity, category=ValidationCategory.STRUCTURE):
        return ValidationIssue(code="X", category=category, severity=severity, message="m", line=1, column=1)

    def test_status_rules(self):
        self.assertEqual(PackValidationReport(well_formed=True).status.value, "PASS")

        report = PackValidationReport(well_formed=True, warnings=[self._issue(ValidationSeverity.WARNING)])
        self.assertEqual(report.status.value, "PASS_WITH_WARNINGS")

        report.errors.append(self._issue(ValidationSeverity.ERROR))
        self.assertEqual(report.status.value, "FAIL")
        self.assertEqual(PackValidationReport(well_formed=False).status.value, "FAIL")

    def test_summary_categories_are_distinct_and_ordered(self):
        report = PackValidationReport(well_formed=True, errors=[
            self._issue(ValidationSeverity.ERROR, ValidationCategory.ENUM),
            self._issue(ValidationSeverity.ERROR, ValidationCategory.STRUCTURE),
            self._issue(ValidationSeverity.ERROR, ValidationCategory.ENUM),
        ])
        summary = report.to_dict()["summary"]

        self.assertEqual(summary["total_errors"], 3)
        self.assertEqual(summary["error_categories"], ["enum", "structure"])
        self.assertEqual(summary["warning_categories"], [])

    def test_issue_omits_allowed_values_unless_set(self):
        self.assertNotIn("allowed_values", self._issue(ValidationSeverity.ERROR).to_dict())

    def test_well_formed_shapes(self):
        self.assertEqual(WellFormedResult(valid=True).to_dict(), {"valid": True})

    def test_mapping_issue_shape(self):
        issue = MappingIssue(field="ltv", code="INVALID_DATATYPE", message="m", mismo_path="LOAN/LOAN_DETAIL/X")

        self.assertEqual(issue.to_dict(), {
            "field": "ltv", "code": "INVALID_DATATYPE", "message": "m", "mismoPath": "LOAN/LOAN_DETAIL/X",
        })

    def test_empty_coverage_report(self):
        payload = CoverageReport(total_fields=0).to_dict()

        self.assertEqual(payload["coverage_percent"], "0.0")
        self.assertNotIn("validation_result", payload)


if __name__ == '__main__':
    unittest.main()
