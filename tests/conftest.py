import pytest

from finplan.models.questionnaire import QuestionScript


@pytest.fixture
def small_script() -> QuestionScript:
    return QuestionScript.model_validate(
        {
            "greeting": "Hi there!",
            "closing": "That's all the information I need for now.",
            "questions": [
                {"id": "name", "prompt": "What's your full name?", "category": "Basic Profile", "input_kind": "free_text"},
                {"id": "age", "prompt": "What's your age?", "category": "Basic Profile", "input_kind": "numeric"},
                {
                    "id": "riskAppetite",
                    "prompt": "How comfortable are you with investment risk?",
                    "category": "Risk Appetite",
                    "input_kind": "single_select",
                    "options": ["Low", "Medium", "High"],
                },
            ],
        }
    )
