from pydantic import BaseModel, ConfigDict


class QuizQuestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    image: bytes
    text: str
    correct_answer: bool


class QuizStepViewModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    image: bytes
    question: str
    question_number: str


class QuizResultsViewModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    text: str
    button_text: str
