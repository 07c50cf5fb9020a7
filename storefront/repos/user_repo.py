from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.address import AddressModel
from storefront.data.models.user import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_by_email(self, email: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(UserModel.email == email)
        ).scalar_one_or_none()

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.flush()
        return user


class AddressRepo:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, address_id: int) -> AddressModel | None:
        return self.db.get(AddressModel, address_id)

    def create(self, address: AddressModel) -> AddressModel:
        self.db.add(address)
        self.db.flush()
        return address
