from dataclasses import dataclass, field
from typing import Dict, Mapping, Tuple

VITAL_KEYS = ("bloodPressure", "heartRate", "temperature", "respiratoryRate")


@dataclass(frozen=True)
class Vocabulary:
    symptom: Tuple[str, ...] = ()
    condition: Tuple[str, ...] = ()
    medication: Tuple[str, ...] = ()
    procedure: Tuple[str, ...] = ()
    vital_sign_label: Tuple[str, ...] = ()

    def __post_init__(self):
        # phrases are matched against lower-cased text
        for name in ("symptom", "condition", "medication", "procedure", "vital_sign_label"):
            phrases = tuple(p.lower() for p in getattr(self, name))
            object.__setattr__(self, name, phrases)

    def categories(self) -> Dict[str, Tuple[str, ...]]:
        return {
            "symptom": self.symptom,
            "condition": self.condition,
            "medication": self.medication,
            "procedure": self.procedure,
            "vital-sign-label": self.vital_sign_label,
        }

    def __contains__(self, phrase: str) -> bool:
        return any(phrase in phrases for phrases in self.categories().values())


@dataclass(frozen=True)
class ExtractionResult:
    symptoms: Tuple[str, ...] = ()
    conditions: Tuple[str, ...] = ()
    medications: Tuple[str, ...] = ()
    procedures: Tuple[str, ...] = ()
    vital_labels: Tuple[str, ...] = ()
    vitals: Mapping[str, str] = field(default_factory=dict)

    def term_groups(self) -> Tuple[Tuple[str, ...], ...]:
        return (
            self.symptoms,
            self.conditions,
            self.medications,
            self.procedures,
            self.vital_labels,
        )

    @property
    def term_count(self) -> int:
        return sum(len(group) for group in self.term_groups())

    def all_terms(self) -> Tuple[str, ...]:
        seen = []
        for group in self.term_groups():
            for term in group:
                if term not in seen:
                    seen.append(term)
        return tuple(seen)

    def to_dict(self) -> Dict[str, object]:
        return {
            "symptoms": list(self.symptoms),
            "conditions": list(self.conditions),
            "medications": list(self.medications),
            "procedures": list(self.procedures),
            "vitalSignLabels": list(self.vital_labels),
            "vitals": dict(self.vitals),
        }


@dataclass(frozen=True)
class Subjective:
    chief_complaint: str
    history_of_present_illness: str
    past_medical_history: str
    medications: str


@dataclass(frozen=True)
class Objective:
    physical_examination: str
    vital_signs: Mapping[str, str]


@dataclass(frozen=True)
class Assessment:
    primary_diagnosis: str
    secondary_diagnoses: str


@dataclass(frozen=True)
class Plan:
    immediate_actions: str
    procedures: str


@dataclass(frozen=True)
class SoapNote:
    subjective: Subjective
    objective: Objective
    assessment: Assessment
    plan: Plan
    generated_at: str
    confidence: float
    medical_terms_found: Tuple[str, ...]

    def to_dict(self) -> Dict[str, object]:
        return {
            "subjective": {
                "chiefComplaint": self.subjective.chief_complaint,
                "historyOfPresentIllness": self.subjective.history_of_present_illness,
                "pastMedicalHistory": self.subjective.past_medical_history,
                "medications": self.subjective.medications,
            },
            "objective": {
                "physicalExamination": self.objective.physical_examination,
                "vitalSigns": dict(self.objective.vital_signs),
            },
            "assessment": {
                "primaryDiagnosis": self.assessment.primary_diagnosis,
                "secondaryDiagnoses": self.assessment.secondary_diagnoses,
            },
            "plan": {
                "immediateActions": self.plan.immediate_actions,
                "procedures": self.plan.procedures,
            },
            "generatedAt": self.generated_at,
            "confidence": self.confidence,
            "medicalTermsFound": list(self.medical_terms_found),
        }
