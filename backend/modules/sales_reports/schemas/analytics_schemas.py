# backend/modules/sales_reports/schemas/analytics_schemas.py

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .order_schemas import CreditStatus, CustomerRef, MenuItemRef, TableRef


class DataSource(str, Enum):
    """Where the orders behind an analytics result came from"""

    REAL = "real"
    SYNTHESIZED = "synthesized"


class ProfitabilityTrend(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class DateRange(BaseModel):
    """Inclusive reporting window with a human label"""

    model_config = ConfigDict(frozen=True)

    start_date: datetime
    end_date: datetime
    label: str

    @model_validator(mode="after")
    def validate_window(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class _Row(BaseModel):
    model_config = ConfigDict(frozen=True)


class MenuItemSalesRow(_Row):
    menu_item_id: str
    name: str
    category_name: str
    quantity_sold: int
    revenue: float
    percentage: float


class CategorySalesRow(_Row):
    category_name: str
    quantity_sold: int
    revenue: float
    percentage: float
    item_count: int = Field(description="Order lines that fell in the category")


class TableSalesRow(_Row):
    table_id: str
    table_number: str
    area: Optional[str] = None
    order_count: int
    revenue: float
    average_order_value: float
    utilization_rate: float = Field(
        description="Share of the window's days on which the table served an order"
    )


class HourlySalesRow(_Row):
    hour: int = Field(ge=0, le=23)
    order_count: int
    revenue: float


class DailySalesRow(_Row):
    date: date
    order_count: int
    revenue: float
    customer_count: int


class PaymentMethodRow(_Row):
    method: str
    count: int
    amount: float
    percentage: float


class OrderTypeRow(_Row):
    type: str
    count: int
    revenue: float
    percentage: float


class CustomerSalesRow(_Row):
    customer_id: str
    customer_name: str
    order_count: int
    total_spent: float
    average_order_value: float
    last_order_date: datetime


class StaffPerformanceRow(_Row):
    staff_id: str
    staff_name: Optional[str] = None
    order_count: int
    total_revenue: float
    average_order_value: float


class PeakHourRow(_Row):
    hour: int = Field(ge=0, le=23)
    order_count: int
    revenue: float
    weekend_order_count: int
    weekday_order_count: int
    is_weekend: bool


class ItemCombinationRow(_Row):
    items: List[str]
    frequency: int
    total_revenue: float


class TaxDiscountSummary(_Row):
    gross_subtotal: float
    total_tax: float
    total_discount: float
    net_revenue: float
    effective_tax_rate: float
    discounted_orders: int
    average_discount: float


class DetailedOrderRow(_Row):
    order_id: str
    order_number: str
    table_number: str
    created_at: datetime
    status: str
    type: str
    payment_info: str
    item_count: int
    total_items: int
    subtotal: float
    tax: float
    total: float
    items_summary: str


class GrowthMetrics(_Row):
    revenue_growth: float = 0.0
    order_growth: float = 0.0
    customer_growth: float = 0.0
    previous_period_start: datetime
    previous_period_end: datetime
    previous_revenue: float = 0.0
    previous_orders: int = 0
    previous_customers: int = 0


class CreditPaymentDetail(_Row):
    amount: float
    payment_method: str
    paid_at: datetime


class CreditTransactionDetail(_Row):
    customer_name: str
    customer_phone: Optional[str] = None
    order_id: str
    table_number: str
    total_amount: float
    amount_received: float
    credit_amount: float
    remaining_amount: float
    status: CreditStatus
    created_at: datetime
    payment_history: List[CreditPaymentDetail] = Field(default_factory=list)


class CreditAnalytics(_Row):
    total_credit_amount: float = 0.0
    pending_credit_amount: float = 0.0
    paid_credit_amount: float = 0.0
    orders_with_credits: int = 0
    revenue_collection_rate: float = 100.0
    credit_transactions: List[CreditTransactionDetail] = Field(default_factory=list)


class BusinessInsights(_Row):
    profitability_trend: ProfitabilityTrend
    recommended_actions: List[str] = Field(default_factory=list)


class SalesAnalytics(BaseModel):
    """
    Aggregate analytics for one restaurant over one window.

    Built fresh per request and never mutated. Optional sections are None
    when their data was not available, so renderers branch on presence.
    """

    model_config = ConfigDict(frozen=True)

    restaurant_id: str
    period_start: datetime
    period_end: datetime
    data_source: DataSource = DataSource.REAL
    generated_at: datetime = Field(default_factory=datetime.now)

    # Overall metrics
    total_revenue: float
    total_orders: int
    average_order_value: float
    total_items: int
    total_customers: int
    repeat_customer_rate: Optional[float] = None
    table_utilization_rate: Optional[float] = None

    # Growth metrics
    revenue_growth: float = 0.0
    order_growth: float = 0.0
    customer_growth: float = 0.0
    growth: Optional[GrowthMetrics] = None

    # Breakdowns
    menu_item_sales: List[MenuItemSalesRow] = Field(default_factory=list)
    category_sales: List[CategorySalesRow] = Field(default_factory=list)
    table_sales: List[TableSalesRow] = Field(default_factory=list)
    hourly_breakdown: List[HourlySalesRow] = Field(default_factory=list)
    daily_breakdown: List[DailySalesRow] = Field(default_factory=list)
    payment_method_breakdown: List[PaymentMethodRow] = Field(default_factory=list)
    order_type_breakdown: List[OrderTypeRow] = Field(default_factory=list)
    top_customers: List[CustomerSalesRow] = Field(default_factory=list)
    staff_performance: List[StaffPerformanceRow] = Field(default_factory=list)
    peak_hours: List[PeakHourRow] = Field(default_factory=list)
    item_combinations: List[ItemCombinationRow] = Field(default_factory=list)
    tax_summary: TaxDiscountSummary

    # Optional sections
    credit_analytics: Optional[CreditAnalytics] = None
    insights: Optional[BusinessInsights] = None
    detailed_orders: Optional[List[DetailedOrderRow]] = None

    @property
    def is_synthetic(self) -> bool:
        return self.data_source == DataSource.SYNTHESIZED


class ReportConfiguration(BaseModel):
    """Section toggles and free text for a rendered report"""

    include_menu_analysis: bool = True
    include_table_analysis: bool = True
    include_customer_analysis: bool = True
    include_staff_analysis: bool = True
    include_time_analysis: bool = True
    include_tax_breakdown: bool = True
    include_discount_analysis: bool = True
    include_credit_analysis: bool = True
    include_order_details: bool = False
    report_title: Optional[str] = None
    additional_notes: Optional[str] = None


class SalesAnalyticsRequest(BaseModel):
    """Request schema for computing analytics over a window"""

    restaurant_id: str = Field(min_length=1)
    start_date: datetime
    end_date: datetime
    menu_items: List[MenuItemRef] = Field(default_factory=list)
    tables: List[TableRef] = Field(default_factory=list)
    customers: List[CustomerRef] = Field(default_factory=list)
    allow_synthetic_data: Optional[bool] = Field(
        None, description="Overrides the configured demonstration-data fallback"
    )

    @model_validator(mode="after")
    def validate_date_range(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class ReportRequest(BaseModel):
    """Request schema for rendered and exported reports"""

    analytics: SalesAnalyticsRequest
    date_range_label: Optional[str] = None
    title: str = Field("Restaurant", description="Heading shown under the report title")
    config: ReportConfiguration = Field(default_factory=ReportConfiguration)
