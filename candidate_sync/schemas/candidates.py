from pydantic import BaseModel, ConfigDict, Field


def natural_key(name: str, email: str) -> tuple[str, str]:
    return name.strip().casefold(), email.strip().casefold()


def split_skills(text: str) -> list[str]:
    return [chunk.strip() for chunk in text.split(",") if chunk.strip()]


class Candidate(BaseModel):
    """A selection-queue row projected onto the stable schema.

    Serialization aliases are the labels the notification consumer reads, so
    ``model_dump(by_alias=True)`` is the webhook body minus its ``Type``.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(default="", serialization_alias="Name ")
    mobile: str = Field(default="", serialization_alias="Mobile no")
    email: str = Field(default="", serialization_alias="Email")
    designation: str = Field(default="", serialization_alias="Designation")
    education: str = Field(default="", serialization_alias="Education")
    experience_years: str = Field(default="", serialization_alias="Years of relevent experience")
    total_experience_years: str = Field(default="", serialization_alias="Years of total experience")
    experience_type: str = Field(default="", serialization_alias="Experience Type")
    technical_score: str = Field(default="0", serialization_alias="Technical Score")
    experience_score: str = Field(default="0", serialization_alias="Experience Score")
    achievements_score: str = Field(default="0", serialization_alias="Achievements Score")
    education_score: str = Field(default="0", serialization_alias="Education Score")
    overall_score: str = Field(default="0", serialization_alias="Overall Score ")
    organization: str = Field(default="", serialization_alias="Current Organization\n")
    projects_and_achievements: str = Field(default="", serialization_alias="Projects & Achievements\n")
    job_role_candidate: str = Field(default="", serialization_alias="Job Role Candidate")
    summary: str = Field(default="", serialization_alias="Summry")
    quick_read: str = Field(default="", serialization_alias="Quick read")
    technical_skills: str = Field(default="", serialization_alias="Technical skill")

    @property
    def skills(self) -> list[str]:
        return split_skills(self.technical_skills)

    @property
    def display_name(self) -> str:
        return self.name or "Unknown"

    @property
    def key(self) -> tuple[str, str]:
        return natural_key(self.name, self.email)


class CandidateOut(BaseModel):
    name: str
    display_name: str
    email: str
    mobile: str
    designation: str
    organization: str
    education: str
    experience_years: str
    total_experience_years: str
    experience_type: str
    technical_score: str
    experience_score: str
    achievements_score: str
    education_score: str
    overall_score: str
    overall_score_value: float
    summary: str
    quick_read: str
    summary_preview: str
    projects_and_achievements: str
    job_role_candidate: str
    technical_skills: str
    skills: list[str] = Field(default_factory=list)
    short_skills: list[str] = Field(default_factory=list)
    more_skills_count: int = 0
    processing: bool = False
