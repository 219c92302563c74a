from app.models import Vocabulary

DEFAULT_VOCABULARY = Vocabulary(
    symptom=(
        "pain",
        "chest pain",
        "headache",
        "fever",
        "shortness of breath",
        "abdominal pain",
        "back pain",
        "nausea",
        "vomiting",
        "dizziness",
        "fatigue",
        "cough",
        "swelling",
    ),
    condition=(
        "hypertension",
        "diabetes",
        "cardiac",
        "respiratory",
        "asthma",
        "migraine",
        "pneumonia",
    ),
    medication=(
        "aspirin",
        "nitroglycerin",
        "metformin",
        "lisinopril",
        "ibuprofen",
        "acetaminophen",
        "albuterol",
    ),
    procedure=(
        "ekg",
        "x-ray",
        "blood test",
        "ultrasound",
        "ct scan",
        "mri",
    ),
    vital_sign_label=(
        "blood pressure",
        "heart rate",
        "temperature",
        "oxygen saturation",
        "respiratory rate",
        "pulse",
    ),
)
