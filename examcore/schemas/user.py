from pydantic import BaseModel

from examcore.core.constants import RoleEnum

class UserContext(BaseModel):
    user_id: int
    role: RoleEnum

    @property
    def is_student(self) -> bool:
        return self.role == RoleEnum.STUDENT

    @property
    def is_instructor(self) -> bool:
        return self.role == RoleEnum.INSTRUCTOR
