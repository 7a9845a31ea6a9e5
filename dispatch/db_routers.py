"""
Read-replica database router.

Enabled by ``DB_REPLICA_URL``.  Plain reads (listings, nearest-hospital
search, availability) go to the replica and may lag slightly; writes,
conditional updates and ``select_for_update`` reads always hit
``default`` because Django routes them through ``db_for_write``.
"""
from django.conf import settings


class ReadReplicaRouter:
    replica = 'replica'

    def db_for_read(self, model, **hints):
        if self.replica in settings.DATABASES:
            return self.replica
        return None

    def db_for_write(self, model, **hints):
        return 'default'

    def allow_relation(self, obj1, obj2, **hints):
        return True

    def allow_migrate(self, db, app_label, model_name=None, **hints):
        return db == 'default'
