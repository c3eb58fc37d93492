"""In-process write lock for conditional writes.

Every check-then-write against orders and vouchers (guarded payment
transition, voucher insert, voucher link) re-reads its state while holding
this lock, so concurrent requests served by one process are serialized and
a duplicate notification observes the first one's result.

The lock does not reach across processes. There, the guard is Protean's
aggregate version check: saving an order loaded before another writer's
save raises ``ExpectedVersionError``, and the webhook answers that with a
retryable 500. Voucher inserts rely on the unique ``order_id`` and ``code``
fields of the voucher store.
"""

import threading

store_lock = threading.RLock()
