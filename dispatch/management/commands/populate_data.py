"""
Management command to populate the database with demo data.
"""
import random

from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand

from dispatch.exceptions import AmbulanceUnavailable
from dispatch.models import Ambulance, Hospital, User
from dispatch.services.booking import book


class Command(BaseCommand):
    help = 'Populate database with demo hospitals, ambulances, users and bookings'

    def add_arguments(self, parser):
        parser.add_argument('--bookings', type=int, default=5)
        parser.add_argument('--seed', type=int, default=None)

    def handle(self, *args, **options):
        rng = random.Random(options['seed'])
        self.stdout.write('Creating demo data...')

        hospitals = self.create_hospitals()
        ambulances = self.create_ambulances(hospitals)
        users = self.create_users()
        made = self.create_bookings(users, ambulances, options['bookings'], rng)

        self.stdout.write(self.style.SUCCESS(
            f'Demo data ready: {len(hospitals)} hospitals, {len(ambulances)} ambulances, '
            f'{len(users)} users, {made} new bookings'
        ))

    def create_hospitals(self):
        hospitals_data = [
            {'name': 'City General Hospital', 'address': '1 Main St', 'latitude': 12.9716, 'longitude': 77.5946,
             'contact_info': '+91 80 1000 0001'},
            {'name': 'Lakeside Medical Centre', 'address': '22 Lake Rd', 'latitude': 12.9352, 'longitude': 77.6245,
             'contact_info': '+91 80 1000 0002'},
            {'name': 'Northside Trauma Unit', 'address': '5 Hill View', 'latitude': 13.0358, 'longitude': 77.5970,
             'contact_info': '+91 80 1000 0003'},
            {'name': 'St. Mary Children Hospital', 'address': '90 Church Ave', 'latitude': 12.9279, 'longitude': 77.6271,
             'contact_info': '+91 80 1000 0004'},
        ]
        hospitals = []
        for data in hospitals_data:
            hospital, created = Hospital.objects.get_or_create(name=data['name'], defaults=data)
            hospitals.append(hospital)
            self.stdout.write(f'Hospital: {hospital.name}{" (new)" if created else ""}')
        return hospitals

    def create_ambulances(self, hospitals):
        ambulances = []
        for h in hospitals:
            for n in range(1, 4):
                ambulance, _ = Ambulance.objects.get_or_create(
                    hospital=h, number=f'KA-{h.id:02d}-{n:03d}',
                    defaults={'driver_info': f'Driver {h.id}-{n}', 'status': Ambulance.STATUS_AVAILABLE},
                )
                ambulances.append(ambulance)
        return ambulances

    def create_users(self):
        users_data = [
            {'email': 'admin@pulseride.test', 'role': User.ROLE_ADMIN, 'latitude': None, 'longitude': None},
            {'email': 'jane@pulseride.test', 'role': User.ROLE_USER, 'latitude': 12.97, 'longitude': 77.59},
            {'email': 'john@pulseride.test', 'role': User.ROLE_USER, 'latitude': 12.93, 'longitude': 77.62},
        ]
        users = []
        for data in users_data:
            user, created = User.objects.get_or_create(
                email=data['email'],
                defaults={**data, 'username': data['email'], 'password': make_password('P@ssw0rd1')},
            )
            users.append(user)
            self.stdout.write(f'User: {user.email} ({user.role})')
        return users

    def create_bookings(self, users, ambulances, count, rng):
        patients = ['Jane Doe', 'John Roe', 'Asha Rao', 'Ravi Kumar', 'Li Wei']
        conditions = ['Chest pain', 'Fracture', 'High fever', 'Breathing difficulty']
        customers = [u for u in users if u.role == User.ROLE_USER]
        made = 0
        for _ in range(count):
            free = [a for a in ambulances if Ambulance.objects.filter(pk=a.pk, status=Ambulance.STATUS_AVAILABLE).exists()]
            if not free or not customers:
                break
            ambulance = rng.choice(free)
            user = rng.choice(customers)
            try:
                book(
                    user.id, ambulance.hospital_id, ambulance.id,
                    rng.choice(['NORMAL', 'EMERGENCY']),
                    {'name': rng.choice(patients), 'age': rng.randint(1, 90),
                     'gender': rng.choice(['Female', 'Male']), 'condition': rng.choice(conditions)},
                )
            except AmbulanceUnavailable:
                continue
            made += 1
        return made
