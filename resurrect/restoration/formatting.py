"""Human-readable renderings of estimates."""

from ..models.restoration import RestorationEstimates


def format_restoration_time(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes} min"
    if minutes < 24 * 60:
        hours, rest = divmod(minutes, 60)
        return f"{hours}h {rest}m" if rest else f"{hours}h"
    days, rest = divmod(minutes, 24 * 60)
    hours = rest // 60
    return f"{days}d {hours}h" if hours else f"{days}d"


def format_file_size(size_bytes: int) -> str:
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if size < 1024 or unit == "TB":
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024


def format_currency(amount: float) -> str:
    return f"${amount:,.2f}"


def summarize_estimates(estimates: RestorationEstimates) -> dict:
    return {
        "assets": estimates.total_assets,
        "size": format_file_size(estimates.total_size_bytes),
        "duration": format_restoration_time(estimates.total_restore_minutes),
        "restore_cost": format_currency(estimates.restore_cost),
        "monthly_cost": format_currency(estimates.storage_cost_per_month),
    }
