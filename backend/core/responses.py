"""JSON envelopes shared by every route: ``{success, message?, data?, count?}``."""

from typing import Generic, TypeVar

from pydantic import BaseModel

DataT = TypeVar("DataT")


class DataResponse(BaseModel, Generic[DataT]):
    success: bool = True
    data: DataT


class MessageDataResponse(BaseModel, Generic[DataT]):
    success: bool = True
    message: str
    data: DataT


class ListResponse(BaseModel, Generic[DataT]):
    success: bool = True
    count: int
    data: list[DataT]


class MessageResponse(BaseModel):
    success: bool
    message: str

