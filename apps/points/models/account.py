from django.db import models, transaction


class PointsAccount(models.Model):
    """Loyalty club account; existence means the customer joined the club"""
    customer = models.OneToOneField('customers.Customer', on_delete=models.CASCADE, related_name='points_account')
    total_points = models.IntegerField(default=0)
    available_points = models.IntegerField(default=0)
    lifetime_earned = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'points_accounts'
        verbose_name = 'Points Account'
        verbose_name_plural = 'Points Accounts'

    def __str__(self):
        return f"{self.customer.email} - {self.available_points} points"

    def add_points(self, amount, transaction_type='earning', description="", reference_id=None, expires_at=None):
        """Add points to the account and create transaction record"""
        if amount <= 0:
            raise ValueError("Points amount must be positive")

        from .transaction import PointsTransaction
        with transaction.atomic():
            account = PointsAccount.objects.select_for_update().get(pk=self.pk)
            account.total_points += amount
            account.available_points += amount
            account.lifetime_earned += amount
            account.save(update_fields=['total_points', 'available_points', 'lifetime_earned', 'updated_at'])

            self.total_points = account.total_points
            self.available_points = account.available_points
            self.lifetime_earned = account.lifetime_earned

            return PointsTransaction.objects.create(
                account=self,
                transaction_type=transaction_type,
                amount=amount,
                balance_after=self.available_points,
                description=description,
                reference_id=reference_id,
                expires_at=expires_at,
            )
