from pydantic import BaseModel, ConfigDict, Field


class ChatbotDescriptor(BaseModel):
    """Connection details of one NLU bot instance."""

    host: str
    channel_id: str
    auth_header: str

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)


class BotIdentity(BaseModel):
    user: str
    chatbot: ChatbotDescriptor

    model_config = ConfigDict(frozen=True)


class NLURequest(BaseModel):
    userId: str
    channelId: str
    text: str


class NLUAnswer(BaseModel):
    text: str

    model_config = ConfigDict(extra="ignore")


class NLUResponse(BaseModel):
    answers: list[NLUAnswer] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")
