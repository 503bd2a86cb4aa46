"""
Survey questions v1.0.

Original 27 questions across 5 categories for the Quick Quality Assessment.
"""
from libs.domain_types import CategoryId

from .schema import Category, Question, SurveyDefinition, SurveyVersion

VERSION = SurveyVersion(
    version="1.0",
    released_at="2026-01-15",
    question_ids=(
        # Daily Sessions (7)
        "ds_001", "ds_002", "ds_003", "ds_004", "ds_005", "ds_006", "ds_007",
        # Treatment Fidelity (5)
        "tf_001", "tf_002", "tf_003", "tf_004", "tf_005",
        # Data Analysis (5)
        "da_001", "da_002", "da_003", "da_004", "da_005",
        # Caregiver Guidance (6)
        "cg_001", "cg_002", "cg_003", "cg_004", "cg_005", "cg_006",
        # Supervision (4)
        "sup_001", "sup_002", "sup_003", "sup_004",
    ),
    max_score=27,
    changelog="Initial release with 27 questions across 5 categories",
)

CATEGORIES = (
    Category(
        id=CategoryId.DAILY_SESSIONS,
        name="Daily Sessions",
        short_name="Sessions",
        description="Evaluate session organization, trial counts, and goal implementation",
        question_count=7,
        max_score=7,
    ),
    Category(
        id=CategoryId.TREATMENT_FIDELITY,
        name="Treatment Fidelity",
        short_name="Fidelity",
        description="Assess adherence to treatment protocols and behavior skills training",
        question_count=5,
        max_score=5,
    ),
    Category(
        id=CategoryId.DATA_ANALYSIS,
        name="Data Analysis",
        short_name="Data",
        description="Review data monitoring and intervention effectiveness practices",
        question_count=5,
        max_score=5,
    ),
    Category(
        id=CategoryId.CAREGIVER_GUIDANCE,
        name="Caregiver Guidance",
        short_name="Caregiver",
        description="Evaluate caregiver involvement and communication processes",
        question_count=6,
        max_score=6,
    ),
    Category(
        id=CategoryId.SUPERVISION,
        name="Supervision",
        short_name="Supervision",
        description="Assess supervision quality, frequency, and clinical alignment",
        question_count=4,
        max_score=4,
    ),
)


def _q(question_id: str, category: CategoryId, text: str) -> Question:
    return Question(id=question_id, category=category, text=text, version_added="1.0")


_DS = CategoryId.DAILY_SESSIONS
_TF = CategoryId.TREATMENT_FIDELITY
_DA = CategoryId.DATA_ANALYSIS
_CG = CategoryId.CAREGIVER_GUIDANCE
_SUP = CategoryId.SUPERVISION

QUESTIONS = (
    # Category 1: Daily Sessions
    _q("ds_001", _DS, "Area is organized and necessary materials are readily available consistently"),
    _q("ds_002", _DS, "Trial count per hour is at least 50 trials on average"),
    _q("ds_003", _DS, "Each goal opened is run to trial criterion (e.g., 10)"),
    _q("ds_004", _DS, "Each goal is implemented at least once a session"),
    _q("ds_005", _DS, "Preference assessments are completed at least once a week"),
    _q(
        "ds_006",
        _DS,
        "The SD, prompting strategy, reinforcement schedules, and target lists are "
        "available for all open goals",
    ),
    _q(
        "ds_007",
        _DS,
        "All BT/RBTs are familiar with all the goals and with the client on a "
        "consistent basis",
    ),
    # Category 2: Treatment Fidelity
    _q(
        "tf_001",
        _TF,
        "Fidelity checks for skill acquisition goals are implemented at least every "
        "two weeks",
    ),
    _q(
        "tf_002",
        _TF,
        "All new goals are introduced using Behavior Skills Training (BST) with BT/RBTs",
    ),
    _q(
        "tf_003",
        _TF,
        "Challenging behavior targets have treatment fidelity checklists for each "
        "component of the behavior plan (e.g., NCR, DRO, FCT)",
    ),
    _q("tf_004", _TF, "The implementation of the behavior plan is presented utilizing BST"),
    _q(
        "tf_005",
        _TF,
        "The implementation of the behavior intervention plan is monitored with "
        "treatment fidelity checklists at least twice a month",
    ),
    # Category 3: Data Analysis
    _q(
        "da_001",
        _DA,
        "There is a standardized approach to ensure that all clinicians review skill "
        "acquisition data every 10 sessions",
    ),
    _q(
        "da_002",
        _DA,
        "There is a standardized approach for BT/RBTs to alert their supervisors of a "
        "problematic goal",
    ),
    _q(
        "da_003",
        _DA,
        "The percentage of goals mastered for current treatment plan goals are "
        "monitored as an organization metric; goals that continue into the next "
        "authorization period have had any barriers identified, resolved, and have "
        "had protocols modified",
    ),
    _q(
        "da_004",
        _DA,
        "There is a standardized way to determine the effectiveness of challenging "
        "behavior interventions",
    ),
    _q(
        "da_005",
        _DA,
        "The interventions selected for challenging behavior have reduced challenging "
        "behavior to a desired level",
    ),
    # Category 4: Caregiver Guidance
    _q("cg_001", _CG, "Caregiver guidance happens at least once a month"),
    _q("cg_002", _CG, "There is good adherence to caregiver goals"),
    _q("cg_003", _CG, "The agency conducts caregiver satisfaction surveys every six months"),
    _q(
        "cg_004",
        _CG,
        "The agency has a structured monthly update interview form to review items "
        "such as medication changes with caregivers",
    ),
    _q(
        "cg_005",
        _CG,
        "The initial caregiver interview includes an area for caregivers to express "
        "their concerns",
    ),
    _q(
        "cg_006",
        _CG,
        "The initial assessment and the 6-month reassessment include a quality of "
        "life measure",
    ),
    # Category 5: Supervision
    _q("sup_001", _SUP, "BCBAs arrive to supervision sessions with a structured plan"),
    _q("sup_002", _SUP, "Supervision sessions involve BST with BT/RBTs"),
    _q("sup_003", _SUP, "Supervision happens at least twice a month"),
    _q(
        "sup_004",
        _SUP,
        "The percentage of supervision is in alignment with what is clinically necessary",
    ),
)

SURVEY = SurveyDefinition(version=VERSION, categories=CATEGORIES, questions=QUESTIONS)
