"""
Multi-step form controller.

A FormStepper walks a fixed, ordered list of steps over an accumulated form
state. It never touches the network or the database; the submit call at the
end of a workflow is made by the intake service once every step passes.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from email_validator import EmailNotValidError, validate_email

from errors import ValidationFailed
from models import ProjectType


@dataclass(frozen=True)
class Step:
    title: str
    description: str
    is_complete: Callable[[object], bool]


def _filled(value) -> bool:
    return bool(value and str(value).strip())


def filled_items(values) -> List[str]:
    """Trimmed entries of a multi-select, blanks dropped."""
    return [v.strip() for v in values or [] if v and v.strip()]


def is_valid_email(value: str) -> bool:
    if not _filled(value):
        return False
    try:
        validate_email(value.strip(), check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


class FormStepper:
    """Holds the current step of one workflow and moves it forward or back."""

    def __init__(self, steps: List[Step], state=None):
        if not steps:
            raise ValueError("a stepper needs at least one step")
        self.steps = list(steps)
        self.state = state
        self.current_step = 1

    @property
    def step_count(self) -> int:
        return len(self.steps)

    @property
    def is_last_step(self) -> bool:
        return self.current_step == self.step_count

    def step(self, number: int) -> Step:
        if number < 1 or number > self.step_count:
            raise ValueError(f"step {number} out of range 1..{self.step_count}")
        return self.steps[number - 1]

    def can_advance(self, step: Optional[int] = None, state=None) -> bool:
        number = self.current_step if step is None else step
        current = self.state if state is None else state
        return bool(self.step(number).is_complete(current))

    def advance(self) -> int:
        if self.can_advance():
            self.current_step = min(self.current_step + 1, self.step_count)
        return self.current_step

    def retreat(self) -> int:
        self.current_step = max(self.current_step - 1, 1)
        return self.current_step

    def first_invalid_step(self, state=None) -> Optional[int]:
        for number in range(1, self.step_count + 1):
            if not self.can_advance(number, state):
                return number
        return None


# -------- Workflows --------

PROJECT_INTAKE_STEPS = [
    Step(
        "Project Type", "What do you need?",
        lambda s: s.project_type in {t.value for t in ProjectType},
    ),
    Step(
        "Features", "What features do you need?",
        lambda s: bool(filled_items(s.features)) or _filled(s.custom_requirements),
    ),
    Step(
        "Budget & Timeline", "What's your budget?",
        lambda s: _filled(s.budget) and _filled(s.timeline),
    ),
    Step(
        "Contact Info", "How can we reach you?",
        lambda s: _filled(s.name) and is_valid_email(s.email),
    ),
]

DEVELOPER_ONBOARDING_STEPS = [
    Step(
        "Basic Info", "Tell us about yourself",
        lambda s: _filled(s.name) and _filled(s.role) and s.experience_years is not None,
    ),
    Step("Skills", "Your expertise", lambda s: len(s.skills) > 0),
    # Portfolio links and screenshots are optional
    Step("Portfolio", "Showcase your work", lambda s: True),
    Step("Availability", "Your schedule", lambda s: bool(s.weekly_hours)),
]

JOB_APPLICATION_STEPS = [
    Step(
        "Apply", "Your details",
        lambda s: _filled(s.name) and _filled(s.email),
    ),
]

CHAT_INQUIRY_STEPS = [
    Step(
        "Message", "Send us a message",
        lambda s: _filled(s.name) and _filled(s.email) and _filled(s.message),
    ),
]

WORKFLOWS: Dict[str, List[Step]] = {
    "project-intake": PROJECT_INTAKE_STEPS,
    "developer-onboarding": DEVELOPER_ONBOARDING_STEPS,
    "job-application": JOB_APPLICATION_STEPS,
    "chat-inquiry": CHAT_INQUIRY_STEPS,
}


def stepper_for(workflow: str, state=None) -> FormStepper:
    try:
        steps = WORKFLOWS[workflow]
    except KeyError:
        raise ValueError(f"unknown workflow: {workflow}")
    return FormStepper(steps, state)


def validate_workflow(workflow: str, state, message: Optional[str] = None) -> None:
    """Raise ValidationFailed naming the first step the state does not satisfy."""
    stepper = stepper_for(workflow, state)
    failing = stepper.first_invalid_step()
    if failing is not None:
        title = stepper.step(failing).title
        raise ValidationFailed(
            message or f"Please complete the '{title}' step",
            step=failing,
        )
