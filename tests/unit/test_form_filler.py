"""Tests for natural-language form filling."""

import pytest

from app.core.intelligence.forms import FieldKey, FieldOption, FormField, FormFiller


def field(name: str, label: str = "", type: str = "text", value=None) -> FormField:
    return FormField(id=name, name=name, type=type, label=label, value=value)


def values(fields: list[FormField]) -> dict:
    return {f.name: f.value for f in fields}


class TestFieldKey:
    """Test field name normalization."""

    def test_camel_case_words(self):
        key = FieldKey.for_field(field("emergencyContactName", "Emergency Contact"))
        assert key.has_word("emergency", "contact", "name")

    def test_nested_name(self):
        key = FieldKey.for_field(field("vision.rightEye.uncorrected", "VA OD sc"))
        assert key.parent == "vision"
        assert key.eye == "righteye"
        assert key.leaf == "uncorrected"

    def test_two_part_name(self):
        key = FieldKey.for_field(field("intraocularPressure.leftEye", "IOP OS"))
        assert key.parent == "intraocularpressure"
        assert key.eye == "lefteye"

    def test_flat_name_has_no_parent(self):
        key = FieldKey.for_field(field("diagnosis"))
        assert key.parent == ""


class TestDemographics:
    """Test intake form rules."""

    @pytest.fixture
    def filler(self):
        return FormFiller()

    def test_names(self, filler):
        fields = [field("firstName", "First Name"), field("lastName", "Last Name")]
        filled = values(filler.fill("My name is Maria Garcia", fields))
        assert filled == {"firstName": "Maria", "lastName": "Garcia"}

    def test_email_and_phone(self, filler):
        fields = [field("email", "Email"), field("phone", "Phone Number")]
        filled = values(filler.fill(
            "Reach me at maria.garcia@example.com or (555) 123-4567.", fields
        ))
        assert filled == {"email": "maria.garcia@example.com", "phone": "(555) 123-4567"}

    def test_date_of_birth_to_iso(self, filler):
        fields = [field("dateOfBirth", "Date of Birth", type="date")]
        filled = values(filler.fill("born on 3/7/1985", fields))
        assert filled == {"dateOfBirth": "1985-03-07"}

    def test_age(self, filler):
        filled = values(filler.fill("She is 42 years old", [field("age", "Age")]))
        assert filled == {"age": 42}

    @pytest.mark.parametrize("text,expected", [
        ("42 year old female", "female"),
        ("male patient", "male"),
        ("identifies as non-binary", "other"),
    ])
    def test_gender(self, filler, text, expected):
        assert values(filler.fill(text, [field("gender", "Gender")])) == {"gender": expected}

    def test_address(self, filler):
        filled = values(filler.fill("Lives at 123 Main Street, apt 4", [field("address", "Address")]))
        assert filled == {"address": "123 Main Street"}

    def test_blood_type(self, filler):
        filled = values(filler.fill("Blood type is AB+", [field("bloodType", "Blood Type")]))
        assert filled == {"bloodType": "AB+"}

    def test_height_in_cm(self, filler):
        filled = values(filler.fill("Height 170 cm", [field("height", "Height (cm)")]))
        assert filled == {"height": 170.0}

    def test_height_in_feet(self, filler):
        filled = values(filler.fill("He is 5 ft 10 in", [field("height", "Height (cm)")]))
        assert filled == {"height": 178.0}

    def test_weight_in_pounds(self, filler):
        filled = values(filler.fill("Weighs 150 lbs", [field("weight", "Weight (kg)")]))
        assert filled == {"weight": 68.0}

    def test_weight_in_kg(self, filler):
        filled = values(filler.fill("weight 72.5 kg", [field("weight", "Weight (kg)")]))
        assert filled == {"weight": 72.5}

    def test_emergency_contact(self, filler):
        fields = [
            field("emergencyContactName", "Emergency Contact Name"),
            field("emergencyContactRelationship", "Relationship"),
        ]
        filled = values(filler.fill("Emergency contact is Carlos Garcia (husband)", fields))
        assert filled == {
            "emergencyContactName": "Carlos Garcia",
            "emergencyContactRelationship": "husband",
        }

    def test_language_and_occupation(self, filler):
        fields = [field("preferredLanguage", "Preferred Language"), field("occupation", "Occupation")]
        filled = values(filler.fill("Speaks spanish. Works as a pharmacist.", fields))
        assert filled == {"preferredLanguage": "Spanish", "occupation": "pharmacist"}


class TestHistory:
    """Test history rules."""

    @pytest.fixture
    def filler(self):
        return FormFiller()

    def test_smoking_and_alcohol(self, filler):
        fields = [field("smokingStatus", "Smoking"), field("alcoholUse", "Alcohol")]
        filled = values(filler.fill("Non-smoker, drinks socially", fields))
        assert filled == {"smokingStatus": "Never smoker", "alcoholUse": "Occasional"}

    def test_former_smoker(self, filler):
        filled = values(filler.fill("Quit smoking in 2010", [field("smokingStatus", "Smoking")]))
        assert filled == {"smokingStatus": "Former smoker"}

    def test_chief_complaint(self, filler):
        fields = [field("chiefComplaint", "Chief Complaint")]
        filled = values(filler.fill("Presents with blurry vision in the left eye. No pain.", fields))
        assert filled == {"chiefComplaint": "blurry vision in the left eye"}

    def test_allergies_medications_family(self, filler):
        fields = [
            field("allergies", "Allergies"),
            field("currentMedications", "Current Medications"),
            field("familyHistory", "Family History"),
        ]
        filled = values(filler.fill(
            "Allergic to penicillin. Medications include timolol and lisinopril. "
            "Family history of glaucoma.",
            fields,
        ))
        assert filled == {
            "allergies": "penicillin",
            "currentMedications": "timolol and lisinopril",
            "familyHistory": "glaucoma",
        }

    def test_insurance(self, filler):
        filled = values(filler.fill("Insurance is Blue Cross", [field("insurance", "Insurance")]))
        assert filled == {"insurance": "Blue Cross"}


class TestEyeExam:
    """Test ophthalmic exam rules."""

    @pytest.fixture
    def filler(self):
        return FormFiller()

    @pytest.fixture
    def acuity_fields(self):
        return [
            field("vision.rightEye.uncorrected", "VA OD sc"),
            field("vision.rightEye.corrected", "VA OD cc"),
            field("vision.leftEye.uncorrected", "VA OS sc"),
            field("vision.leftEye.corrected", "VA OS cc"),
        ]

    @pytest.fixture
    def pressure_fields(self):
        return [
            field("intraocularPressure.rightEye", "IOP OD", type="number"),
            field("intraocularPressure.leftEye", "IOP OS", type="number"),
        ]

    def test_visual_acuity_shorthand(self, filler, acuity_fields):
        filled = values(filler.fill("VA OD 20/40 sc, 20/20 cc. VA OS 20/30 sc, 20/25 cc.", acuity_fields))
        assert filled == {
            "vision.rightEye.uncorrected": "20/40",
            "vision.rightEye.corrected": "20/20",
            "vision.leftEye.uncorrected": "20/30",
            "vision.leftEye.corrected": "20/25",
        }

    def test_visual_acuity_plain_words(self, filler, acuity_fields):
        filled = values(filler.fill(
            "Right eye 20/40, corrected to 20/20; left eye 20/60 with correction",
            acuity_fields,
        ))
        assert filled["vision.rightEye.uncorrected"] == "20/40"
        assert filled["vision.rightEye.corrected"] == "20/20"
        assert filled["vision.leftEye.corrected"] == "20/60"
        assert filled["vision.leftEye.uncorrected"] is None

    @pytest.mark.parametrize("text", [
        "IOP OD 16, OS 18",
        "IOP 16 OD, 18 OS",
        "IOP 16/18",
        "16 mmHg OD and 18 mmHg OS",
    ])
    def test_intraocular_pressure(self, filler, pressure_fields, text):
        filled = values(filler.fill(text, pressure_fields))
        assert filled == {
            "intraocularPressure.rightEye": 16,
            "intraocularPressure.leftEye": 18,
        }

    def test_diagnosis_codes(self, filler):
        filled = values(filler.fill(
            "Assessment: early cataract and ocular hypertension, rule out glaucoma",
            [field("diagnosis", "Diagnosis")],
        ))
        assert filled == {"diagnosis": "H25 - Cataract, H40 - Glaucoma"}

    def test_segments_plan_follow_up(self, filler):
        fields = [
            field("anteriorSegment", "Anterior Segment"),
            field("posteriorSegment", "Posterior Segment"),
            field("plan", "Plan"),
            field("followUp", "Follow Up"),
        ]
        filled = values(filler.fill(
            "Anterior segment shows 2+ nuclear sclerosis. "
            "Posterior segment: healthy optic nerve OU. "
            "Plan: start latanoprost qhs. "
            "Follow up in 3 months.",
            fields,
        ))
        assert filled == {
            "anteriorSegment": "2+ nuclear sclerosis",
            "posteriorSegment": "healthy optic nerve OU",
            "plan": "start latanoprost qhs",
            "followUp": "3 months",
        }

    def test_nested_follow_up_not_filled_with_plan(self, filler):
        fields = [field("plan.treatment"), field("plan.followUp")]
        filled = values(filler.fill(
            "Plan: start latanoprost qhs. Follow up in 3 months.",
            fields,
        ))
        assert filled == {
            "plan.treatment": "start latanoprost qhs",
            "plan.followUp": "3 months",
        }

    def test_nested_follow_up_without_follow_up_text(self, filler):
        filled = values(filler.fill("Plan: start latanoprost qhs.", [field("plan.followUp")]))
        assert filled == {"plan.followUp": None}


class TestFormFiller:
    """Test filler behavior independent of individual rules."""

    @pytest.fixture
    def filler(self):
        return FormFiller()

    def test_inputs_not_modified(self, filler):
        fields = [field("email", "Email")]
        filled = filler.fill("maria@example.com", fields)
        assert fields[0].value is None
        assert filled[0].value == "maria@example.com"
        assert filled[0] is not fields[0]

    def test_unmatched_fields_keep_value(self, filler):
        fields = [field("email", "Email", value="old@example.com"), field("notes", "Notes", value="keep")]
        filled = values(filler.fill("Phone 555-123-4567", fields))
        assert filled == {"email": "old@example.com", "notes": "keep"}

    def test_empty_text(self, filler):
        fields = [field("age", "Age")]
        assert values(filler.fill("   ", fields)) == {"age": None}

    def test_options_preserved(self, filler):
        gender = FormField(
            id="g",
            name="gender",
            type="select",
            label="Gender",
            options=[FieldOption("Female", "female"), FieldOption("Male", "male")],
        )
        filled = filler.fill("female", [gender])[0]
        assert filled.value == "female"
        assert [o.value for o in filled.options] == ["female", "male"]

    def test_custom_rules(self):
        filler = FormFiller(rules=[("shout", lambda k: True, lambda text, k: text.upper())])
        assert values(filler.fill("hi", [field("anything")])) == {"anything": "HI"}

    def test_form_field_round_trip_dict(self):
        data = {
            "id": "1",
            "name": "gender",
            "type": "select",
            "label": "Gender",
            "value": None,
            "options": [{"label": "Female", "value": "female"}],
        }
        assert FormField.from_dict(data).to_dict() == data
