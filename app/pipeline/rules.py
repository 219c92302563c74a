import re
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, Pattern, Sequence, Tuple, TypeVar, Union

from app.models import ExtractionResult

T = TypeVar("T")

Keyword = Union[str, Pattern]
Options = Tuple[Tuple[Keyword, str], ...]

# "pressure" as a pain quality, not the vital sign
PRESSURE_RE = re.compile(r"(?<!blood )pressure")

DURATION_RE = re.compile(
    r"\b(\d+|one|two|three|four|five|six|seven|eight|nine|ten|eleven|twelve)"
    r"\s*(days?|hours?|weeks?)\b",
    re.I,
)

NUMBER_WORDS = {
    "one": "1", "two": "2", "three": "3", "four": "4", "five": "5", "six": "6",
    "seven": "7", "eight": "8", "nine": "9", "ten": "10", "eleven": "11",
    "twelve": "12",
}


@dataclass(frozen=True)
class NoteContext:
    text: str
    lowered: str
    extraction: ExtractionResult

    @classmethod
    def build(cls, text: str, extraction: ExtractionResult) -> "NoteContext":
        return cls(text=text, lowered=text.lower(), extraction=extraction)

    def has(self, *keywords: str) -> bool:
        return any(k in self.lowered for k in keywords)

    def matches(self, keyword: Keyword) -> bool:
        if isinstance(keyword, str):
            return keyword in self.lowered
        return keyword.search(self.lowered) is not None

    def pick(self, options: Options) -> Optional[str]:
        """First option whose keyword is present, else None."""
        for keyword, clause in options:
            if self.matches(keyword):
                return clause
        return None

    def duration(self) -> Optional[str]:
        m = DURATION_RE.search(self.text)
        if not m:
            return None
        amount = m.group(1).lower()
        amount = NUMBER_WORDS.get(amount, amount)
        return f"for {amount} {m.group(2).lower()}"


@dataclass(frozen=True)
class Rule(Generic[T]):
    name: str
    applies: Callable[[NoteContext], bool]
    produce: Callable[[NoteContext], T]


def when(*keywords: str) -> Callable[[NoteContext], bool]:
    return lambda ctx: ctx.has(*keywords)


def when_all(*predicates: Callable[[NoteContext], bool]) -> Callable[[NoteContext], bool]:
    return lambda ctx: all(p(ctx) for p in predicates)


def always(value: T) -> Callable[[NoteContext], T]:
    return lambda ctx: value


def first_match(rules: Sequence[Rule[T]], ctx: NoteContext, fallback: T) -> T:
    for rule in rules:
        if rule.applies(ctx):
            return rule.produce(ctx)
    return fallback


def all_matches(rules: Sequence[Rule[T]], ctx: NoteContext) -> List[T]:
    return [rule.produce(ctx) for rule in rules if rule.applies(ctx)]


# --------------------
# COMPLAINT / HPI
# --------------------

def describe(
    subject: str,
    *groups: Options,
    extra: Optional[Callable[[NoteContext], Optional[str]]] = None,
):
    """
    HPI producer: subject followed by one clause per matching qualifier
    group, any extra clause, then the duration if one was dictated.
    """

    def produce(ctx: NoteContext) -> Tuple[str, str]:
        clauses = [ctx.pick(group) for group in groups]
        if extra is not None:
            clauses.append(extra(ctx))
        clauses.append(ctx.duration())
        clauses = [c for c in clauses if c]

        complaint = f"Patient reports {subject.lower()}"
        if not clauses:
            return complaint, f"{subject}, further characterization not documented."
        return complaint, f"{subject} {', '.join(clauses)}."

    return produce


def _recorded_temperature(ctx: NoteContext) -> Optional[str]:
    temperature = ctx.extraction.vitals.get("temperature")
    if temperature:
        return f"recorded temperature {temperature}"
    return None


CHEST_PAIN_CHARACTER: Options = (
    ("sharp", "described as sharp"),
    ("dull", "described as dull"),
    (PRESSURE_RE, "described as pressure-like"),
    ("burning", "described as burning"),
)

CHEST_PAIN_RADIATION: Options = (
    ("left arm", "radiating to left arm"),
    ("jaw", "radiating to jaw"),
    ("to the back", "radiating to back"),
)

COMPLAINT_RULES: Tuple[Rule, ...] = (
    Rule(
        "chest pain",
        when("chest pain"),
        describe(
            "Chest pain",
            CHEST_PAIN_CHARACTER,
            CHEST_PAIN_RADIATION,
            (
                ("shortness of breath", "with associated shortness of breath"),
                ("sweat", "with diaphoresis"),
                ("nausea", "with nausea"),
            ),
        ),
    ),
    Rule(
        "headache",
        when("headache"),
        describe(
            "Headache",
            (
                ("throbbing", "described as throbbing"),
                (PRESSURE_RE, "described as pressure-like"),
                ("sharp", "described as sharp"),
            ),
            (
                ("one side", "unilateral"),
                ("forehead", "frontal"),
                ("back of the head", "occipital"),
            ),
            (
                ("photophobia", "with sensitivity to light"),
                ("to light", "with sensitivity to light"),
                ("nausea", "with nausea"),
                ("vision", "with visual changes"),
            ),
        ),
    ),
    Rule(
        "fever",
        when("fever"),
        describe(
            "Fever",
            (
                ("chills", "with chills"),
                ("night sweats", "with night sweats"),
            ),
            (
                ("cough", "with cough"),
                ("sore throat", "with sore throat"),
                ("urination", "with urinary symptoms"),
            ),
            extra=_recorded_temperature,
        ),
    ),
    Rule(
        "shortness of breath",
        when("shortness of breath"),
        describe(
            "Shortness of breath",
            (
                ("exertion", "on exertion"),
                ("at rest", "at rest"),
                ("lying flat", "when lying flat"),
            ),
            (
                ("wheez", "with wheezing"),
                ("cough", "with cough"),
            ),
        ),
    ),
    Rule(
        "abdominal pain",
        when("abdominal pain"),
        describe(
            "Abdominal pain",
            (
                ("right lower", "in the right lower quadrant"),
                ("upper", "in the upper abdomen"),
                ("lower", "in the lower abdomen"),
            ),
            (
                ("vomit", "with vomiting"),
                ("nausea", "with nausea"),
                ("diarrhea", "with diarrhea"),
            ),
        ),
    ),
    Rule(
        "back pain",
        when("back pain"),
        describe(
            "Back pain",
            (
                ("lower back", "in the lower back"),
                ("upper back", "in the upper back"),
            ),
            (
                ("lifting", "after lifting"),
                ("fall", "after a fall"),
            ),
            (
                ("leg", "radiating to leg"),
            ),
        ),
    ),
)

# --------------------
# PHYSICAL EXAM
# --------------------

def finding(options: Options, default: str) -> Callable[[NoteContext], str]:
    return lambda ctx: ctx.pick(options) or default


EXAM_RULES: Tuple[Rule, ...] = (
    Rule(
        "cardiac",
        when("heart sounds", "cardiac"),
        finding(
            (
                ("no murmur", "Heart sounds normal, no murmur appreciated"),
                ("murmur", "Cardiac exam reveals a murmur"),
                ("abnormal", "Heart sounds abnormal"),
                ("normal", "Heart sounds normal, regular rate and rhythm"),
            ),
            "Cardiac examination performed",
        ),
    ),
    Rule(
        "respiratory",
        when("lungs", "respiratory"),
        finding(
            (
                ("not clear", "Lungs not clear to auscultation"),
                ("no wheez", "Lungs without wheezing"),
                ("wheez", "Expiratory wheezing on auscultation"),
                ("no crackles", "Lungs without crackles"),
                ("crackles", "Crackles on auscultation"),
                ("clear", "Lungs clear to auscultation bilaterally"),
            ),
            "Respiratory examination performed",
        ),
    ),
    Rule(
        "abdomen",
        when("abdomen"),
        finding(
            (
                ("non-tender", "Abdomen soft, non-tender"),
                ("nontender", "Abdomen soft, non-tender"),
                ("tender", "Abdomen tender to palpation"),
                ("soft", "Abdomen soft, non-tender"),
            ),
            "Abdominal examination performed",
        ),
    ),
    Rule(
        "edema",
        when("edema", "swelling"),
        finding(
            (
                ("no edema", "No peripheral edema"),
                ("no swelling", "No peripheral edema"),
                ("bilateral", "Bilateral lower extremity edema"),
            ),
            "Peripheral edema noted",
        ),
    ),
)

# --------------------
# ASSESSMENT
# --------------------

ASSESSMENT_RULES: Tuple[Rule, ...] = (
    Rule(
        "chest pain, cardiac workup",
        when_all(when("chest pain"), when("cardiac", "ekg")),
        always("Chest pain, rule out acute coronary syndrome"),
    ),
    Rule(
        "chest pain",
        when("chest pain"),
        always("Chest pain, likely musculoskeletal in origin"),
    ),
    Rule(
        "headache, migraine features",
        when_all(when("headache"), when("migraine", "to light", "photophobia", "nausea")),
        always("Headache, likely migraine"),
    ),
    Rule(
        "headache",
        when("headache"),
        always("Headache, likely tension-type"),
    ),
    Rule(
        "fever, respiratory source",
        when_all(when("fever"), when("cough", "sore throat")),
        always("Febrile illness, possible upper respiratory infection"),
    ),
    Rule(
        "fever",
        when("fever"),
        always("Febrile illness, source to be determined"),
    ),
    Rule(
        "shortness of breath, reactive airway",
        when_all(when("shortness of breath"), when("wheez", "asthma")),
        always("Dyspnea, likely reactive airway disease"),
    ),
    Rule(
        "shortness of breath",
        when("shortness of breath"),
        always("Dyspnea, etiology to be determined"),
    ),
    Rule(
        "abdominal pain, right lower quadrant",
        when_all(when("abdominal pain"), when("right lower")),
        always("Right lower quadrant abdominal pain, rule out appendicitis"),
    ),
    Rule(
        "abdominal pain",
        when("abdominal pain"),
        always("Abdominal pain, etiology to be determined"),
    ),
    Rule(
        "back pain",
        when("back pain"),
        always("Mechanical back pain"),
    ),
)

# --------------------
# PLAN
# --------------------

PLAN_RULES: Tuple[Rule, ...] = (
    Rule(
        "chest pain",
        when("chest pain"),
        always("Obtain EKG and troponin, aspirin if no contraindication, cardiology follow-up"),
    ),
    Rule(
        "headache",
        when("headache"),
        always("Analgesics as needed, headache diary, follow up in 2 weeks"),
    ),
    Rule(
        "fever",
        when("fever"),
        always("Antipyretics and fluids, CBC and cultures if fever persists"),
    ),
    Rule(
        "shortness of breath",
        when("shortness of breath"),
        always("Pulse oximetry, chest X-ray, bronchodilator trial"),
    ),
    Rule(
        "abdominal pain",
        when("abdominal pain"),
        always("CBC, lipase and abdominal ultrasound, NPO pending evaluation"),
    ),
    Rule(
        "back pain",
        when("back pain"),
        always("NSAIDs, activity as tolerated, physical therapy referral"),
    ),
)


@dataclass(frozen=True)
class Placeholders:
    chief_complaint: str = "Patient presents with symptoms"
    history_of_present_illness: str = "Details of current symptoms and timeline"
    past_medical_history: str = "Past medical history to be reviewed"
    medications: str = "Current medications to be reviewed"
    physical_examination: str = "Physical examination findings to be documented"
    primary_diagnosis: str = "Clinical assessment pending"
    secondary_diagnoses: str = "None identified"
    immediate_actions: str = "Follow up as clinically indicated"
    procedures: str = "None ordered"


@dataclass(frozen=True)
class RuleBook:
    complaint: Tuple[Rule, ...] = COMPLAINT_RULES
    exam: Tuple[Rule, ...] = EXAM_RULES
    assessment: Tuple[Rule, ...] = ASSESSMENT_RULES
    plan: Tuple[Rule, ...] = PLAN_RULES
    history_keywords: Tuple[str, ...] = (
        "history of",
        "past medical",
        "previous",
        "diagnosed with",
    )
    placeholders: Placeholders = Placeholders()


DEFAULT_RULEBOOK = RuleBook()
