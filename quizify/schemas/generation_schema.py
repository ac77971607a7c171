"""Shapes expected back from the language model.

Every agent validates the raw JSON it receives against one of these models
before anything else in the application sees it.
"""
from pydantic import BaseModel, Field, AliasChoices, model_validator
from typing import Optional, List, Any

from quizify.schemas.quiz_schema import Mcq


class PageGenerationOutput(BaseModel):
    mcqs: List[Mcq]
    page_notes: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("page_notes", "pageNotes"),
    )


class CurationOutput(BaseModel):
    # Entries are left untyped; bounds and shape are checked per entry by the curator
    selected_indices: Optional[List[Any]] = Field(
        None,
        validation_alias=AliasChoices("selected_indices", "selectedIndices"),
    )
    selected_mcqs: Optional[List[Any]] = Field(
        None,
        validation_alias=AliasChoices("selected_mcqs", "selectedMcqs"),
    )

    @model_validator(mode="after")
    def one_protocol_present(self):
        if self.selected_indices is None and self.selected_mcqs is None:
            raise ValueError("response carries neither selectedIndices nor selectedMcqs")
        return self


class ElaborationOutput(BaseModel):
    elaborated_explanation: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("elaborated_explanation", "elaboratedExplanation"),
    )
