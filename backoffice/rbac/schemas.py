"""
Typed permission records.

One model per flag vocabulary, so a matrix carrying an unknown module or
flag is rejected at the edge instead of silently evaluating to False later.
Field names are snake_case; the wire format is camelCase.
"""

from pydantic import BaseModel, ConfigDict, Field, StrictBool
from pydantic.alias_generators import to_camel


class _PermissionRecord(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class ViewPermission(_PermissionRecord):
    view: StrictBool = False


class CrudPermission(ViewPermission):
    create: StrictBool = False
    edit: StrictBool = False
    delete: StrictBool = False
    export: StrictBool = False


class SessionPermission(CrudPermission):
    end_session: StrictBool = False


class CompliancePermission(CrudPermission):
    view_messages: StrictBool = False
    flag_content: StrictBool = False


class WalletPermission(CrudPermission):
    process_refund: StrictBool = False
    approve_withdrawal: StrictBool = False
    manual_adjustment: StrictBool = False


class TicketPermission(CrudPermission):
    assign_tickets: StrictBool = False
    close_tickets: StrictBool = False


class NotificationPermission(CrudPermission):
    send_push: StrictBool = False
    send_email: StrictBool = False


class ReportPermission(ViewPermission):
    export: StrictBool = False
    access_financial: StrictBool = False


class SettingsPermission(CrudPermission):
    modify_razorpay: StrictBool = False
    modify_commission: StrictBool = False


class PermissionMatrix(_PermissionRecord):
    """Complete matrix; omitted modules default to no access."""

    dashboard: ViewPermission = Field(default_factory=ViewPermission)
    user_management: CrudPermission = Field(default_factory=CrudPermission)
    listener_management: CrudPermission = Field(default_factory=CrudPermission)
    session_management: SessionPermission = Field(default_factory=SessionPermission)
    compliance: CompliancePermission = Field(default_factory=CompliancePermission)
    wallet_payments: WalletPermission = Field(default_factory=WalletPermission)
    support_ticketing: TicketPermission = Field(default_factory=TicketPermission)
    notifications: NotificationPermission = Field(
        default_factory=NotificationPermission
    )
    reports: ReportPermission = Field(default_factory=ReportPermission)
    settings: SettingsPermission = Field(default_factory=SettingsPermission)
    admin_management: CrudPermission = Field(default_factory=CrudPermission)
    roles_permissions: CrudPermission = Field(default_factory=CrudPermission)
    system_health: ViewPermission = Field(default_factory=ViewPermission)

    def to_matrix(self) -> dict[str, dict[str, bool]]:
        """Plain dict keyed by module and flag wire names."""
        return self.model_dump(by_alias=True)
