"""Project (job) snapshots used for permission decisions."""

from pydantic import BaseModel, ConfigDict


class ProjectCustomer(BaseModel):
    """Customer linked to a project. `user_id` is set when the customer is an agent account."""
    model_config = ConfigDict(frozen=True)

    id: str | None = None
    user_id: str | None = None


class Project(BaseModel):
    """A booked shoot. Assignment references are nullable."""
    model_config = ConfigDict(frozen=True)

    id: str | None = None
    org_id: str
    technician_id: str | None = None
    editor_id: str | None = None
    project_manager_id: str | None = None
    customer: ProjectCustomer | None = None

    @property
    def customer_user_id(self) -> str | None:
        return self.customer.user_id if self.customer else None
