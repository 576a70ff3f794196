from datetime import date

from food_export import CurrencyConverter, load_settings
from food_export.stats.report import generate_report

settings = load_settings()

# File cache at EXCHANGE_RATES_CACHE, remote lookups when EXCHANGE_RATES_API_KEY is set
converter = CurrencyConverter.from_settings(settings)

rate = converter.resolve_rate("USD", date(2024, 5, 20))
print(rate)  # e.g. 445.12, or None without a key and cache entry

amount = converter.convert_to_base(12.5, "USD", date(2024, 5, 20))
print(converter.format(amount))  # KZT 5,564

converted = converter.convert(3, "EUR", date(2024, 5, 20))
print(converted.amount, converted.approximate)

# Print the statistics report for a previous `food-export-orders` run
print("\n".join(generate_report(settings.data_dir, converter)))
