"""Cap table aggregation.

Turns a company's raw records into ownership rows as of a date:

    1. Keep records dated on or before the as-of date
    2. Outstanding balance per (holder, class) from the ledger
    3. Outstanding options and policy-counted RSUs per holder
    4. As-converted shares of outstanding convertibles (fully diluted view)
    5. FD total = outstanding + options + RSUs + convertibles + unallocated pool
    6. Percentages of the outstanding and FD totals
    7. Rows by descending FD ownership in either view, then stakeholder id,
       then class id; the unallocated pool row last

Options, RSUs and convertibles of a holder sit on the holder's primary row
(largest outstanding balance). Holders with derivative holdings only get a
row without a security class, so FD percentages always add up to 100.
"""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple, Union

from ..calculations.balances import cost_basis, ledger_balances
from ..calculations.notes import convert_note
from ..calculations.option_plans import plan_accounting
from ..calculations.pricing import reference_round
from ..calculations.rounding import ZERO, calculate_percentage, round_money, round_shares
from ..calculations.safe import convert_safe
from ..calculations.vesting import vested_for_award
from ..config import Settings, get_settings
from ..errors import ConfigurationError, ValidationError
from ..logging_config import get_logger
from ..schemas import (
    CapTableMeta,
    CapTableResult,
    CapTableRow,
    CapTableTotals,
    CapTableView,
    CompanyDataset,
    ConversionTerms,
    OptionAward,
    RsuAward,
    RsuPolicy,
    SafeInstrument,
    UNALLOCATED_POOL_ID,
)
from .repository import CapTableRepository, load_dataset

logger = get_logger(__name__)


def _rsu_count(award: RsuAward, policy: RsuPolicy, as_of: date) -> int:
    if policy == RsuPolicy.NONE:
        return 0
    if policy == RsuPolicy.VESTED:
        return max(0, vested_for_award(award, as_of) - award.quantity_exercised)
    return award.outstanding


def _unallocated_pool(dataset: CompanyDataset, as_of: date) -> Decimal:
    accounting = plan_accounting(dataset.option_plans, dataset.awards, as_of=as_of)
    if dataset.option_plans and accounting.over_allocated:
        logger.warning(
            "option_plan_overallocated",
            company_id=dataset.company_id,
            total_shares=accounting.total_shares,
            shortfall=-accounting.available_shares,
        )
    return Decimal(max(0, accounting.available_shares))


def _sort_key(row: CapTableRow) -> Tuple:
    return (-row.pct_fully_diluted, row.stakeholder_id, row.security_class_id or "")


def build_cap_table(
    dataset: CompanyDataset,
    as_of: date,
    view: Union[CapTableView, str] = CapTableView.FULLY_DILUTED,
    rsu_policy: Union[RsuPolicy, str] = RsuPolicy.GRANTED,
    include_pool: bool = True,
    tolerance_bps: Decimal = Decimal("50"),
) -> CapTableResult:
    """Compute the cap table of a dataset as of a date.

    Never raises for degenerate data: an empty company yields zero totals
    and zero percentages, and convertibles that cannot convert are reported
    in ``meta.unconverted_instrument_ids`` instead of failing the table.
    """
    view = CapTableView(view)
    rsu_policy = RsuPolicy(rsu_policy)

    # Step 1-2: ledger balances as of the date
    balances = {
        key: qty for key, qty in ledger_balances(dataset.ledger_entries, as_of).items() if qty != 0
    }
    basis = cost_basis(dataset.ledger_entries, as_of)

    # Step 3: awards per holder
    options: Dict[str, Decimal] = defaultdict(Decimal)
    rsus: Dict[str, Decimal] = defaultdict(Decimal)
    for award in dataset.awards:
        if award.grant_date > as_of:
            continue
        if isinstance(award, OptionAward):
            options[award.holder_id] += award.outstanding
        else:
            rsus[award.holder_id] += _rsu_count(award, rsu_policy, as_of)

    pool_available = _unallocated_pool(dataset, as_of)
    pool_counted = pool_available if include_pool else ZERO

    total_outstanding = Decimal(sum(balances.values()))
    total_options = sum(options.values(), ZERO)
    total_rsus = sum(rsus.values(), ZERO)

    # Step 4: convertibles, as-converted at the reference round
    round_, reconciliation = reference_round(dataset.rounds, as_of, tolerance_bps)
    price = reconciliation.price_per_share

    converted: Dict[str, Decimal] = defaultdict(Decimal)
    unconverted: List[str] = []
    if view == CapTableView.FULLY_DILUTED:
        pre_round_fd = total_outstanding + total_options + total_rsus + pool_counted
        terms = ConversionTerms(
            price_per_share=price,
            pre_round_fully_diluted_shares=pre_round_fd,
            as_of_date=as_of,
        )
        for instrument in sorted(dataset.convertibles, key=lambda c: c.id):
            if not instrument.is_outstanding(as_of):
                continue
            try:
                if isinstance(instrument, SafeInstrument):
                    shares = convert_safe(instrument, terms).shares_issued
                else:
                    shares = convert_note(instrument, terms).shares_issued
            except (ConfigurationError, ValidationError) as exc:
                logger.debug(
                    "convertible_not_converted",
                    instrument_id=instrument.id,
                    error_code=exc.code,
                    reason=exc.message,
                )
                unconverted.append(instrument.id)
                continue
            converted[instrument.holder_id] += shares

    total_convertibles = sum(converted.values(), ZERO)

    # Step 5: fully diluted total
    fd_total = round_shares(total_outstanding + total_options + total_rsus + total_convertibles + pool_counted)

    # Primary row per holder: largest balance, then lowest class id
    primary: Dict[str, Tuple[str, str]] = {}
    for (holder_id, class_id), qty in sorted(balances.items(), key=lambda kv: (-kv[1], kv[0][1])):
        primary.setdefault(holder_id, (holder_id, class_id))

    keys: List[Tuple[str, Optional[str]]] = list(balances)
    if view == CapTableView.FULLY_DILUTED:
        derivative_holders = sorted(set(options) | set(rsus) | set(converted))
        keys += [
            (holder_id, None)
            for holder_id in derivative_holders
            if holder_id not in primary
            and (options[holder_id] or rsus[holder_id] or converted[holder_id])
        ]

    # Step 6: rows and percentages
    rows: List[CapTableRow] = []
    for holder_id, class_id in keys:
        outstanding = Decimal(balances.get((holder_id, class_id), 0)) if class_id else ZERO
        is_primary = class_id is None or primary.get(holder_id) == (holder_id, class_id)
        holder_options = options[holder_id] if is_primary else ZERO
        holder_rsus = rsus[holder_id] if is_primary else ZERO
        holder_converted = converted[holder_id] if is_primary else ZERO
        fd = round_shares(outstanding + holder_options + holder_rsus + holder_converted)

        badges = tuple(
            badge
            for badge, amount in (
                ("Options", holder_options),
                ("RSUs", holder_rsus),
                ("Convertibles", holder_converted),
            )
            if amount > 0
        )

        stakeholder = dataset.stakeholder(holder_id)
        security_class = dataset.security_class(class_id) if class_id else None

        rows.append(
            CapTableRow(
                stakeholder_id=holder_id,
                stakeholder_name=stakeholder.name if stakeholder else holder_id,
                security_class_id=class_id,
                security_class_name=security_class.name if security_class else None,
                outstanding_shares=round_shares(outstanding),
                options=round_shares(holder_options),
                rsus=round_shares(holder_rsus),
                convertibles=round_shares(holder_converted),
                fully_diluted_shares=fd,
                pct_outstanding=calculate_percentage(outstanding, total_outstanding),
                pct_fully_diluted=calculate_percentage(fd, fd_total),
                value=round_money(price * outstanding) if price is not None else None,
                cost_basis=round_money(basis.get((holder_id, class_id), ZERO)) if class_id else round_money(ZERO),
                badges=badges,
            )
        )

    # Step 7: deterministic order, pool last
    rows.sort(key=_sort_key)

    if view == CapTableView.FULLY_DILUTED and include_pool and pool_available > 0:
        rows.append(
            CapTableRow(
                stakeholder_id=UNALLOCATED_POOL_ID,
                stakeholder_name="Unallocated Option Pool",
                row_type="option_pool",
                fully_diluted_shares=round_shares(pool_available),
                pct_fully_diluted=calculate_percentage(pool_available, fd_total),
            )
        )

    totals = CapTableTotals(
        outstanding_shares=round_shares(total_outstanding),
        options=round_shares(total_options),
        rsus=round_shares(total_rsus),
        convertibles=round_shares(total_convertibles),
        pool_available=round_shares(pool_available),
        fully_diluted_shares=fd_total,
        price_per_share=price,
        current_valuation=round_money(price * total_outstanding) if price is not None else None,
    )

    meta = CapTableMeta(
        as_of=as_of,
        view=view,
        rsu_policy=rsu_policy,
        pool_in_denominator=include_pool,
        reference_round_id=round_.id if round_ is not None else None,
        price_source=reconciliation.source,
        price_conflict=reconciliation.conflict,
        unconverted_instrument_ids=tuple(unconverted),
    )

    return CapTableResult(totals=totals, rows=rows, meta=meta)


def compute_cap_table(
    repository: CapTableRepository,
    company_id: str,
    as_of: Optional[date] = None,
    view: Union[CapTableView, str] = CapTableView.FULLY_DILUTED,
    rsu_policy: Optional[Union[RsuPolicy, str]] = None,
    settings: Optional[Settings] = None,
) -> CapTableResult:
    """Load a company from the repository and compute its cap table.

    Args:
        repository: Read-only source of the company's records
        company_id: Company to compute
        as_of: Snapshot date (defaults to today; echoed in ``meta.as_of``)
        view: OUTSTANDING or FULLY_DILUTED
        rsu_policy: none / granted / vested (defaults to settings)
        settings: Engine settings (defaults to ``get_settings()``)

    Returns:
        CapTableResult with totals, sorted rows and meta
    """
    settings = settings or get_settings()
    as_of = as_of or date.today()
    policy = RsuPolicy(rsu_policy or settings.DEFAULT_RSU_POLICY)

    dataset = load_dataset(repository, company_id)
    result = build_cap_table(
        dataset,
        as_of=as_of,
        view=view,
        rsu_policy=policy,
        include_pool=settings.INCLUDE_UNALLOCATED_POOL,
        tolerance_bps=settings.PRICE_TOLERANCE_BPS,
    )

    logger.debug(
        "cap_table_computed",
        company_id=company_id,
        as_of=as_of.isoformat(),
        view=result.meta.view,
        rows=len(result.rows),
        outstanding_shares=str(result.totals.outstanding_shares),
        fully_diluted_shares=str(result.totals.fully_diluted_shares),
    )
    if result.meta.price_conflict:
        logger.warning(
            "price_sources_conflict",
            company_id=company_id,
            round_id=result.meta.reference_round_id,
        )
    return result
