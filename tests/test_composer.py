import pytest

from app.models import ExtractionResult
from app.pipeline.composer import NoteComposer
from app.pipeline.rules import Placeholders, Rule, RuleBook, always, when
from conftest import FIXED_NOW

PLACEHOLDERS = Placeholders()


def _compose(composer, extractor, text):
    return composer.compose(text, extractor.extract(text))


def test_chest_pain_with_radiation_and_duration(composer, extractor):
    text = (
        "Patient presents with chest pain for the past three days. "
        "Pain is sharp and radiates to the left arm."
    )
    note = _compose(composer, extractor, text)

    assert note.subjective.chief_complaint == "Patient reports chest pain"
    hpi = note.subjective.history_of_present_illness
    assert "sharp" in hpi
    assert "radiating to left arm" in hpi
    assert "for 3 days" in hpi
    assert note.assessment.primary_diagnosis == "Chest pain, likely musculoskeletal in origin"


def test_chest_pain_with_ekg_rules_out_acs(composer, extractor):
    note = _compose(composer, extractor, "Chest pain since noon, EKG ordered.")
    assert note.assessment.primary_diagnosis == "Chest pain, rule out acute coronary syndrome"


def test_no_triggers_falls_back_to_placeholders(extractor):
    text = "The weather is nice today."
    composer = NoteComposer(scoring="tiered")
    note = _compose(composer, extractor, text)

    assert note.subjective.chief_complaint == PLACEHOLDERS.chief_complaint
    assert note.subjective.history_of_present_illness == PLACEHOLDERS.history_of_present_illness
    assert note.subjective.past_medical_history == PLACEHOLDERS.past_medical_history
    assert note.subjective.medications == PLACEHOLDERS.medications
    assert note.objective.physical_examination == PLACEHOLDERS.physical_examination
    assert note.assessment.primary_diagnosis == PLACEHOLDERS.primary_diagnosis
    assert note.assessment.secondary_diagnoses == PLACEHOLDERS.secondary_diagnoses
    assert note.plan.immediate_actions == PLACEHOLDERS.immediate_actions
    assert note.plan.procedures == PLACEHOLDERS.procedures
    assert note.medical_terms_found == ()
    assert note.confidence == 0.5


def test_no_triggers_saturating_floor_grows_with_length(composer, extractor):
    text = "The weather is nice today."
    note = _compose(composer, extractor, text)
    assert note.confidence == pytest.approx(0.85 + 0.001 * len(text))
    assert note.confidence == pytest.approx(0.876)


def test_empty_transcript(composer, extractor):
    note = _compose(composer, extractor, "")
    assert note.subjective.chief_complaint == PLACEHOLDERS.chief_complaint
    assert dict(note.objective.vital_signs) == {}
    assert note.confidence == 0.85
    assert note.medical_terms_found == ()


def test_vitals_pass_through(composer, extractor):
    note = _compose(composer, extractor, "Blood pressure is 160/95, heart rate 88, temperature 98.6")
    assert dict(note.objective.vital_signs) == {
        "bloodPressure": "160/95",
        "heartRate": "88 bpm",
        "temperature": "98.6°F",
    }


def test_deterministic_apart_from_timestamp(extractor):
    text = "Headache for 2 hours, throbbing, with nausea. Lungs clear."
    extraction = extractor.extract(text)

    first = NoteComposer().compose(text, extraction).to_dict()
    second = NoteComposer().compose(text, extraction).to_dict()
    first.pop("generatedAt")
    second.pop("generatedAt")
    assert first == second


def test_generated_at_uses_clock(composer, extractor):
    note = _compose(composer, extractor, "anything")
    assert note.generated_at == FIXED_NOW.isoformat()


def test_complaint_priority(composer, extractor):
    note = _compose(composer, extractor, "Fever and a headache since yesterday")
    assert note.subjective.chief_complaint == "Patient reports headache"
    assert note.plan.immediate_actions.startswith("Analgesics")

    note = _compose(composer, extractor, "Headache, then chest pain this morning")
    assert note.subjective.chief_complaint == "Patient reports chest pain"


def test_uncharacterised_complaint(composer, extractor):
    note = _compose(composer, extractor, "I have a headache")
    assert note.subjective.history_of_present_illness == (
        "Headache, further characterization not documented."
    )
    assert note.assessment.primary_diagnosis == "Headache, likely tension-type"


def test_fever_mentions_recorded_temperature(composer, extractor):
    note = _compose(composer, extractor, "Fever since yesterday, temperature 101.3, with chills")
    assert note.subjective.history_of_present_illness == (
        "Fever with chills, recorded temperature 101.3°F."
    )
    assert note.assessment.primary_diagnosis == "Febrile illness, source to be determined"


def test_duration_in_hours(composer, extractor):
    note = _compose(composer, extractor, "Abdominal pain in the right lower side for 12 hours")
    hpi = note.subjective.history_of_present_illness
    assert hpi == "Abdominal pain in the right lower quadrant, for 12 hours."
    assert note.assessment.primary_diagnosis == (
        "Right lower quadrant abdominal pain, rule out appendicitis"
    )


def test_physical_exam_joins_findings_in_order(composer, extractor):
    text = "Abdomen soft and non-tender. Lungs clear. Heart sounds normal."
    note = _compose(composer, extractor, text)
    assert note.objective.physical_examination == (
        "Heart sounds normal, regular rate and rhythm. "
        "Lungs clear to auscultation bilaterally. "
        "Abdomen soft, non-tender."
    )


def test_physical_exam_secondary_keywords(composer, extractor):
    note = _compose(composer, extractor, "Cardiac exam with a murmur, bilateral leg swelling")
    assert note.objective.physical_examination == (
        "Cardiac exam reveals a murmur. Bilateral lower extremity edema."
    )


@pytest.mark.parametrize(
    "text, expected",
    [
        (
            "Heart sounds abnormal. Lungs not clear.",
            "Heart sounds abnormal. Lungs not clear to auscultation.",
        ),
        (
            "Heart sounds with no murmur. Lungs with no wheezing.",
            "Heart sounds normal, no murmur appreciated. Lungs without wheezing.",
        ),
        (
            "Lungs with no crackles.",
            "Lungs without crackles.",
        ),
    ],
)
def test_physical_exam_negated_findings(composer, extractor, text, expected):
    note = _compose(composer, extractor, text)
    assert note.objective.physical_examination == expected


def test_blood_pressure_is_not_a_pain_quality(composer, extractor):
    note = _compose(composer, extractor, "Chest pain. Blood pressure 140/90.")
    assert note.subjective.history_of_present_illness == (
        "Chest pain, further characterization not documented."
    )

    note = _compose(composer, extractor, "Chest pain, feels like pressure.")
    assert note.subjective.history_of_present_illness == (
        "Chest pain described as pressure-like."
    )


def test_supplementary_fields(composer, extractor):
    text = (
        "Patient has history of hypertension and diabetes. "
        "Took aspirin and metformin. Recommending EKG."
    )
    note = _compose(composer, extractor, text)
    assert note.subjective.past_medical_history == "Patient has history of hypertension and diabetes"
    assert note.subjective.medications == "aspirin, metformin"
    assert note.assessment.secondary_diagnoses == "hypertension, diabetes"
    assert note.plan.procedures == "ekg"


def test_medical_terms_found_order(composer, extractor):
    note = _compose(composer, extractor, "Chest pain, took aspirin, blood pressure checked, EKG")
    assert note.medical_terms_found == ("pain", "chest pain", "aspirin", "ekg", "blood pressure")


def test_custom_rulebook():
    rulebook = RuleBook(
        complaint=(
            Rule("cough", when("cough"), always(("Patient reports cough", "Cough."))),
        ),
        assessment=(),
        plan=(),
    )
    composer = NoteComposer(rulebook=rulebook)
    note = composer.compose("Chest pain and a cough", ExtractionResult())

    assert note.subjective.chief_complaint == "Patient reports cough"
    assert note.assessment.primary_diagnosis == PLACEHOLDERS.primary_diagnosis


def test_to_dict_keys(composer, extractor):
    data = _compose(composer, extractor, "chest pain").to_dict()
    assert set(data) == {
        "subjective",
        "objective",
        "assessment",
        "plan",
        "generatedAt",
        "confidence",
        "medicalTermsFound",
    }
    assert data["subjective"]["chiefComplaint"] == "Patient reports chest pain"
