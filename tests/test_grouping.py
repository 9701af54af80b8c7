from datetime import datetime

from sage_log_builder.entries import Direction, RequiredTest
from sage_log_builder.grouping import find_in_week, group_by_month, rwt_received_sources, select, weeks_of


def test_group_by_month_orders_keys_and_keeps_input_order(sent_rmt, received_rwt):
    a = received_rwt(datetime(2024, 4, 2, 10, 0))
    b = sent_rmt(datetime(2024, 3, 20, 9, 0))
    c = received_rwt(datetime(2024, 3, 5, 8, 0))
    groups = group_by_month([a, b, c])
    assert list(groups) == ["2024/03", "2024/04"]
    march = groups["2024/03"]
    assert (march.year, march.month, march.key, march.sheet_name) == (2024, 3, "2024/03", "03-2024")
    assert march.entries == (b, c)
    assert groups["2024/04"].entries == (a,)


def test_month_boundary_uses_wall_clock(received_rwt):
    groups = group_by_month([received_rwt(datetime(2024, 3, 31, 23, 59, 59)),
                             received_rwt(datetime(2024, 4, 1, 0, 0, 0))])
    assert list(groups) == ["2024/03", "2024/04"]


def test_weeks_cover_every_entry_kind(sent_rmt, received_rwt, march):
    entries = [received_rwt(march(12)), sent_rmt(march(5)), received_rwt(march(13)), sent_rmt(march(1))]
    assert weeks_of(entries) == [datetime(2024, 2, 25), datetime(2024, 3, 3), datetime(2024, 3, 10)]


def test_rwt_sources_only_received_weekly(sent_rwt, received_rwt, received_rmt, march):
    entries = [
        received_rwt(march(5), "b source"),
        received_rwt(march(6), "a source"),
        received_rwt(march(12), "b source"),
        received_rmt(march(7), "rmt only"),
        sent_rwt(march(8)),
    ]
    assert rwt_received_sources(entries) == ["a source", "b source"]


def test_find_in_week_bounds_and_first_match(received_rwt, march):
    start = datetime(2024, 3, 10)
    second = received_rwt(march(12, 9))
    first = received_rwt(march(14, 9))
    edge = received_rwt(march(17))  # next Sunday, outside
    assert find_in_week([edge, first, second], "WXK68 162.55 NWS Monitor 3", start) is first
    assert find_in_week([edge], "WXK68 162.55 NWS Monitor 3", start) is None
    assert find_in_week([first], "other", start) is None


def test_select_sorts_by_time(sent_rmt, received_rmt, march):
    late, early = sent_rmt(march(20)), sent_rmt(march(2))
    picked = select([late, received_rmt(march(1)), early], Direction.SENT, RequiredTest.RMT)
    assert picked == [early, late]
