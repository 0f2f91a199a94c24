"""Wire models for transfers, refunds, reversals and schedules."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class MoovModel(BaseModel):
    """Base model: camelCase aliases on the wire, unknown fields preserved."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class Amount(MoovModel):
    currency: str = "USD"
    value: int


class AmountDecimal(MoovModel):
    currency: str = "USD"
    value_decimal: str = Field(alias="valueDecimal")


class TransferAccount(MoovModel):
    account_id: str = Field(alias="accountID")
    email: str | None = None
    display_name: str | None = Field(default=None, alias="displayName")


class TransferParty(MoovModel):
    """Source or destination of a transfer as returned by the server."""

    payment_method_id: str | None = Field(default=None, alias="paymentMethodID")
    payment_method_type: str | None = Field(default=None, alias="paymentMethodType")
    transfer_id: str | None = Field(default=None, alias="transferID")
    account: TransferAccount | None = None


class CreateTransferSource(MoovModel):
    payment_method_id: str | None = Field(default=None, alias="paymentMethodID")
    transfer_id: str | None = Field(default=None, alias="transferID")


class CreateTransferDestination(MoovModel):
    payment_method_id: str = Field(alias="paymentMethodID")


class FacilitatorFee(MoovModel):
    total: int | None = None
    total_decimal: str | None = Field(default=None, alias="totalDecimal")
    markup: int | None = None
    markup_decimal: str | None = Field(default=None, alias="markupDecimal")


class CreateTransfer(MoovModel):
    source: CreateTransferSource
    destination: CreateTransferDestination
    amount: Amount
    facilitator_fee: FacilitatorFee | None = Field(default=None, alias="facilitatorFee")
    description: str | None = None
    metadata: dict[str, str] | None = None


class TransferStarted(MoovModel):
    """Handle returned when a transfer was created but not yet processed by the rail."""

    transfer_id: str = Field(alias="transferID")
    created_on: datetime = Field(alias="createdOn")


class Refund(MoovModel):
    refund_id: str = Field(alias="refundID")
    created_on: datetime = Field(alias="createdOn")
    updated_on: datetime | None = Field(default=None, alias="updatedOn")
    status: str
    failure_code: str | None = Field(default=None, alias="failureCode")
    amount: Amount


class RefundStarted(MoovModel):
    refund_id: str = Field(alias="refundID")
    created_on: datetime = Field(alias="createdOn")
    status: str | None = None
    amount: Amount | None = None


class Transfer(MoovModel):
    transfer_id: str = Field(alias="transferID")
    created_on: datetime = Field(alias="createdOn")
    completed_on: datetime | None = Field(default=None, alias="completedOn")
    status: str
    failure_reason: str | None = Field(default=None, alias="failureReason")
    amount: Amount
    description: str | None = None
    metadata: dict[str, str] | None = None
    source: TransferParty | None = None
    destination: TransferParty | None = None
    facilitator_fee: FacilitatorFee | None = Field(default=None, alias="facilitatorFee")
    moov_fee: int | None = Field(default=None, alias="moovFee")
    moov_fee_decimal: str | None = Field(default=None, alias="moovFeeDecimal")
    group_id: str | None = Field(default=None, alias="groupID")
    refunded_amount: Amount | None = Field(default=None, alias="refundedAmount")
    refunds: list[Refund] | None = None
    disputed_amount: Amount | None = Field(default=None, alias="disputedAmount")


class PatchTransfer(MoovModel):
    metadata: dict[str, str] | None = None


class CreateRefund(MoovModel):
    amount: int


class CreateReversal(MoovModel):
    amount: int


class Cancellation(MoovModel):
    cancellation_id: str = Field(alias="cancellationID")
    status: str
    created_on: datetime = Field(alias="createdOn")


class CreatedReversal(MoovModel):
    """A reversal resolves as either a cancellation or a refund."""

    cancellation: Cancellation | None = None
    refund: Refund | None = None


class TransferOptionsParty(MoovModel):
    account_id: str | None = Field(default=None, alias="accountID")
    payment_method_id: str | None = Field(default=None, alias="paymentMethodID")


class CreateTransferOptions(MoovModel):
    source: TransferOptionsParty
    destination: TransferOptionsParty
    amount: Amount


class PaymentMethod(MoovModel):
    payment_method_id: str = Field(alias="paymentMethodID")
    payment_method_type: str = Field(alias="paymentMethodType")


class TransferOptions(MoovModel):
    source_options: list[PaymentMethod] = Field(default_factory=list, alias="sourceOptions")
    destination_options: list[PaymentMethod] = Field(
        default_factory=list, alias="destinationOptions"
    )


class SchedulePaymentMethod(MoovModel):
    payment_method_id: str = Field(alias="paymentMethodID")


class RunTransfer(MoovModel):
    """Transfer template executed by a schedule occurrence."""

    amount: Amount
    description: str | None = None
    partner_account_id: str = Field(alias="partnerAccountID")
    source: SchedulePaymentMethod
    destination: SchedulePaymentMethod


class CreateOccurrence(MoovModel):
    run_on: datetime = Field(alias="runOn")
    run_transfer: RunTransfer = Field(alias="runTransfer")


class Recur(MoovModel):
    recurrence_rule: str = Field(alias="recurrenceRule")
    start: datetime | None = None
    run_transfer: RunTransfer = Field(alias="runTransfer")
    indefinite: bool | None = None


class CreateSchedule(MoovModel):
    description: str | None = None
    occurrences: list[CreateOccurrence] = Field(default_factory=list)
    recur: Recur | None = None


class Occurrence(MoovModel):
    occurrence_id: str = Field(alias="occurrenceID")
    run_on: datetime = Field(alias="runOn")
    run_transfer: RunTransfer | None = Field(default=None, alias="runTransfer")
    status: str | None = None
    canceled_on: datetime | None = Field(default=None, alias="canceledOn")


class Schedule(MoovModel):
    schedule_id: str = Field(alias="scheduleID")
    description: str | None = None
    occurrences: list[Occurrence] = Field(default_factory=list)
    recur: Recur | None = None
    created_on: datetime | None = Field(default=None, alias="createdOn")
    updated_on: datetime | None = Field(default=None, alias="updatedOn")
    disabled_on: datetime | None = Field(default=None, alias="disabledOn")
