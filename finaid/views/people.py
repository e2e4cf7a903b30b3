"""People pages: list and create/edit."""

from finaid.models.resources import (
    EMAIL_MAX_LENGTH,
    NAME_MAX_LENGTH,
    ListParams,
    Person,
    PersonInput,
)
from finaid.services.api import ResourceInterface
from finaid.views.edit_view import EditViewController, is_valid_email
from finaid.views.list_view import ListViewController


PEOPLE_ROUTE = "/people"


class PersonListController(ListViewController[Person]):
    entity_label = "person"
    delete_confirm_label = "Delete Person"

    async def _fetch_page(self, params: ListParams) -> list[Person]:
        return await self._api.persons.list(params)

    async def _delete(self, entity_id: int) -> None:
        await self._api.persons.delete(entity_id)

    def describe_for_delete(self, entity: Person) -> str:
        return (
            f'Are you sure you want to delete "{entity.name}"? This action cannot be undone '
            "and will permanently remove this person from the system."
        )


class PersonFormController(EditViewController[Person, PersonInput]):
    entity_label = "person"
    list_route = PEOPLE_ROUTE

    @property
    def resource(self) -> ResourceInterface:
        return self._api.persons

    def default_values(self) -> dict[str, str]:
        return {"name": "", "email": ""}

    def values_from_entity(self, entity: Person) -> dict[str, str]:
        return {"name": entity.name, "email": entity.email}

    def validate(self) -> dict[str, str]:
        errors = {}
        name = self.values["name"].strip()
        email = self.values["email"].strip()

        if not name:
            errors["name"] = "Name is required"
        elif len(name) < 2:
            errors["name"] = "Name must be at least 2 characters"
        elif len(name) > NAME_MAX_LENGTH:
            errors["name"] = f"Name must be at most {NAME_MAX_LENGTH} characters"

        if not email:
            errors["email"] = "Email is required"
        elif len(email) > EMAIL_MAX_LENGTH:
            errors["email"] = f"Email must be at most {EMAIL_MAX_LENGTH} characters"
        elif not is_valid_email(email):
            errors["email"] = "Please enter a valid email address"

        return errors

    def build_input(self) -> PersonInput:
        return PersonInput(
            name=self.values["name"].strip(),
            email=self.values["email"].strip(),
        )
