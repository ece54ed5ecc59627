from __future__ import annotations

from typing import Annotated

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage
from langchain_core.outputs import ChatGeneration, ChatResult
from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, Field

from deepcsv import Cap, CsvOutputParser


class Contact(BaseModel):
    email: str
    phone: str


class UserInfo(BaseModel):
    name: str
    age: int = Field(..., ge=0)
    contact: Contact
    hobbies: Annotated[list[str], Cap(2)]


parser = CsvOutputParser(model=UserInfo)


class FakeCsvChatModel(BaseChatModel):
    def _generate(self, messages, stop=None, run_manager=None, **kwargs):
        content = "```csv\nJohn,25,john@example.com,555-0123,soccer,coding\n```"
        return ChatResult(generations=[ChatGeneration(message=AIMessage(content=content))])

    @property
    def _llm_type(self) -> str:
        return "fake-csv-chat-model"


prompt = ChatPromptTemplate.from_messages([
    ("human", "Describe {input}\n\n{format_instructions}")
])

chain = prompt | FakeCsvChatModel() | parser

print(parser.get_format_instructions())
print()
result = chain.invoke({
    "input": "John, 25 years old, likes soccer and coding.",
    "format_instructions": parser.get_format_instructions(),
})
print(result)
