from pydantic import BaseModel, ConfigDict, field_validator

from app.db.models.dependency import DependencyType

LONG_NAMES = {
    "FinishToStart": DependencyType.fs.value,
    "StartToStart": DependencyType.ss.value,
    "FinishToFinish": DependencyType.ff.value,
    "StartToFinish": DependencyType.sf.value,
}


class DependencyCreate(BaseModel):
    predecessor_id: int
    successor_id: int
    type: DependencyType = DependencyType.fs
    lag: int = 0

    @field_validator("type", mode="before")
    @classmethod
    def _accept_long_names(cls, v):
        if isinstance(v, str):
            return LONG_NAMES.get(v, v)
        return v


class DependencyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    predecessor_id: int
    successor_id: int
    type: str
    lag: int
