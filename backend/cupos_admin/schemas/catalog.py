from typing import List

from pydantic import BaseModel


class OptionOut(BaseModel):
    value: str
    label: str


class OptionsOut(BaseModel):
    options: List[OptionOut]
