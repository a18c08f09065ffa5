from eve_value import AggregationPolicy, CalculatorSettings, ValueCalculator, render_state
from eve_value.ingestion.feeds import AggregateRecordFeed, OrderBookFeed, StatisticsMapFeed

print(ValueCalculator.__version__)  # 0.1.0

# Default usage: packs.json + omega.json in the working directory, ESI prices feed
with ValueCalculator() as calculator:
    state = calculator.refresh()
    print(render_state(state))

# Cheapest sell order on the global PLEX market, falling back to ESI and Fuzzwork
settings = CalculatorSettings(
    offers_source="packs.json",
    plans_source="omega.json",
    feeds=(
        OrderBookFeed(max_pages=5),
        AggregateRecordFeed(),
        StatisticsMapFeed(fields=("median", "percentile")),
    ),
    aggregation_policy=AggregationPolicy.MIN,
)
with ValueCalculator(settings) as calculator:
    state = calculator.refresh()
    print(state.rate)
    # => ReferenceRate(value=5123000.0, aggregation_policy=<AggregationPolicy.MIN: 'min'>, ...)
    for row in state.offer_rows:
        print(row.offer.name, row.cost_per_unit, row.cost_per_block, sorted(row.best_metrics))

    # Value the same catalog at a hand-typed rate when the feed is down
    if calculator.set_manual_rate(5_000_000):
        print(render_state(calculator.state))
