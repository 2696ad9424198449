from django.db import models
from django.db.models import Q

"""
PatientQuestionnaire fields:
id (added by Django)
intake: at_clinic; consent; name; resident_id (national ID, informal key); gender; phone; address
private insurance: has_private_insurance; private_insurance_period; insurance_company
emergency contact: emergency_contact_name / _relation / _phone
visit: visit_reason; treatment_area (comma separated); referral_source;
       referrer_name / _phone / _birth_year; last_visit
history: medications; medical_conditions; allergies (+ other_*); pregnancy; smoking; dental_fears
additional_info; submitted_at; created_at
"""
class PatientQuestionnaire(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    submitted_at = models.DateTimeField(null=True, blank=True)

    at_clinic = models.BooleanField(default=False)
    consent = models.BooleanField(default=False)
    name = models.CharField(max_length=100)
    resident_id = models.CharField(max_length=14, blank=True, db_index=True)
    gender = models.CharField(max_length=10, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)

    has_private_insurance = models.BooleanField(default=False)
    private_insurance_period = models.CharField(max_length=50, blank=True)
    insurance_company = models.CharField(max_length=100, blank=True)

    emergency_contact_name = models.CharField(max_length=100, blank=True)
    emergency_contact_relation = models.CharField(max_length=50, blank=True)
    emergency_contact_phone = models.CharField(max_length=20, blank=True)

    visit_reason = models.TextField(blank=True)
    treatment_area = models.TextField(blank=True)
    referral_source = models.CharField(max_length=100, blank=True)
    referrer_name = models.CharField(max_length=100, blank=True)
    referrer_phone = models.CharField(max_length=20, blank=True)
    referrer_birth_year = models.CharField(max_length=10, blank=True)
    last_visit = models.CharField(max_length=50, blank=True)

    medications = models.TextField(blank=True)
    other_medication = models.TextField(blank=True)
    medical_conditions = models.TextField(blank=True)
    other_condition = models.TextField(blank=True)
    allergies = models.TextField(blank=True)
    other_allergy = models.TextField(blank=True)
    pregnancy_status = models.CharField(max_length=50, blank=True)
    pregnancy_week = models.CharField(max_length=20, blank=True)
    smoking_status = models.CharField(max_length=50, blank=True)
    smoking_amount = models.CharField(max_length=50, blank=True)
    dental_fears = models.TextField(blank=True)

    additional_info = models.TextField(blank=True)

    class Meta:
        constraints = [
            # blank national IDs are allowed (walk-in rows), filled ones must be unique
            models.UniqueConstraint(
                fields=['resident_id'],
                condition=~Q(resident_id=''),
                name='uniq_questionnaire_resident_id',
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.resident_id or '-'})"


"""
Consultation fields:
patient_id (resident ID string, no FK); consultation_date; patient_type; doctor; consultant
consultation_result; money fields (KRW); treatment item counts; contact attempts 1-3
memo; today/next treatment; appointment date/time; treatment_status
created_at; last_modified_at (null until the first edit)
"""
class Consultation(models.Model):
    PATIENT_TYPE_CHOICES = [
        ('신환', '신환'),
        ('구환', '구환'),
    ]
    RESULT_CHOICES = [
        ('비동의', '비동의'),
        ('부분동의', '부분동의'),
        ('전체동의', '전체동의'),
        ('보류', '보류'),
        ('환불', '환불'),
    ]
    CONTACT_TYPE_CHOICES = [
        ('방문', '방문'),
        ('전화', '전화'),
    ]

    created_at = models.DateTimeField(auto_now_add=True)
    last_modified_at = models.DateTimeField(null=True, blank=True)

    patient_id = models.CharField(max_length=14, db_index=True)
    consultation_date = models.DateField(null=True, blank=True)
    patient_type = models.CharField(max_length=10, choices=PATIENT_TYPE_CHOICES, default='신환')
    doctor = models.CharField(max_length=50, blank=True)
    consultant = models.CharField(max_length=50, blank=True)
    treatment_details = models.TextField(blank=True)
    consultation_content = models.TextField(blank=True)
    consultation_result = models.CharField(max_length=10, choices=RESULT_CHOICES, default='보류')

    diagnosis_amount = models.BigIntegerField(default=0)
    consultation_amount = models.BigIntegerField(default=0)
    payment_amount = models.BigIntegerField(default=0)
    remaining_payment = models.BigIntegerField(default=0)
    non_consent_reason = models.TextField(blank=True)

    ip_count = models.PositiveIntegerField(default=0)
    ipd_count = models.PositiveIntegerField(default=0)
    ipb_count = models.PositiveIntegerField(default=0)
    bg_count = models.PositiveIntegerField(default=0)
    cr_count = models.PositiveIntegerField(default=0)
    in_count = models.PositiveIntegerField(default=0)
    r_count = models.PositiveIntegerField(default=0)
    ca_count = models.PositiveIntegerField(default=0)

    first_contact_date = models.DateField(null=True, blank=True)
    first_contact_type = models.CharField(max_length=10, choices=CONTACT_TYPE_CHOICES, default='전화')
    second_contact_date = models.DateField(null=True, blank=True)
    second_contact_type = models.CharField(max_length=10, choices=CONTACT_TYPE_CHOICES, default='전화')
    third_contact_date = models.DateField(null=True, blank=True)
    third_contact_type = models.CharField(max_length=10, choices=CONTACT_TYPE_CHOICES, default='전화')

    consultation_memo = models.TextField(blank=True)
    today_treatment = models.CharField(max_length=100, blank=True)
    next_treatment = models.CharField(max_length=100, blank=True)
    appointment_date = models.DateField(null=True, blank=True)
    appointment_time = models.CharField(max_length=10, blank=True)
    treatment_status = models.CharField(max_length=20, blank=True)

    def __str__(self):
        return f"{self.patient_id} {self.consultation_date} ({self.consultation_result})"


"""
MessageGeneration: request row, inserted by the dashboard and consumed by the worker
snapshot of the patient + consultation at request time; status; error_message
MessageStorage: result row written by the worker (custom_message, message_generated_at)
"""
class MessageGeneration(models.Model):
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('processing', 'Processing'),
        ('completed', 'Completed'),
        ('failed', 'Failed'),
    ]

    patient_id = models.CharField(max_length=14, db_index=True)
    consultation_id = models.BigIntegerField()
    patient_name = models.CharField(max_length=100, blank=True)
    patient_phone = models.CharField(max_length=20, blank=True)
    patient_gender = models.CharField(max_length=10, blank=True)
    patient_birth = models.CharField(max_length=20, blank=True)
    consultation_date = models.DateField(null=True, blank=True)
    doctor = models.CharField(max_length=50, blank=True)
    consultant = models.CharField(max_length=50, blank=True)
    consultation_result = models.CharField(max_length=10, blank=True)
    next_visit_date = models.DateField(null=True, blank=True)
    next_visit_time = models.CharField(max_length=10, blank=True)
    treatments = models.TextField(blank=True)
    medical_conditions = models.TextField(blank=True)
    medications = models.TextField(blank=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending', db_index=True)
    llm_provider = models.CharField(max_length=20, blank=True)
    error_message = models.TextField(blank=True)
    message_requested_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"MessageGeneration #{self.id} - {self.patient_name} ({self.status})"


class MessageStorage(models.Model):
    generation = models.OneToOneField(
        MessageGeneration, on_delete=models.CASCADE, related_name='storage'
    )
    custom_message = models.TextField()
    message_generated_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"MessageStorage for #{self.generation_id}"
