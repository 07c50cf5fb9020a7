from sqlalchemy.orm import Session

from storefront.data.models.address import AddressModel
from storefront.data.models.user import UserModel
from storefront.domain.errors import NotFound
from storefront.domain.schemas import UserCreate, AddressCreate
from storefront.repos.unit_of_work import UnitOfWork, step
from storefront.repos.user_repo import UserRepo, AddressRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepo(db)
        self.addresses = AddressRepo(db)

    def create_user(self, payload: UserCreate) -> UserModel:
        with UnitOfWork(self.db):
            existing = self.repo.get_by_email(payload.email)
            if existing:
                return existing

            with step("create-user"):
                address = self.addresses.create(AddressModel(**payload.address.model_dump()))
                user = self.repo.create_user(
                    UserModel(
                        email=payload.email,
                        name=payload.name,
                        surname=payload.surname,
                        address_id=address.id,
                    )
                )
            user_id = user.id

        logger.info(f"Created user {user_id}")
        return self.get_user(user_id)

    def get_user(self, user_id: int) -> UserModel:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFound("user", user_id)
        return user

    def create_address(self, payload: AddressCreate) -> AddressModel:
        with UnitOfWork(self.db):
            with step("create-address"):
                address = self.addresses.create(AddressModel(**payload.model_dump()))

        return address

    def get_address(self, address_id: int) -> AddressModel:
        address = self.addresses.find_by_id(address_id)
        if not address:
            raise NotFound("address", address_id)
        return address
