from django.db import models
from django.urls import reverse
from django.utils.translation import gettext_lazy as _


class Campaign(models.Model):
    """An advocacy campaign; its custom targets replace the built-in representative lookup."""

    COUNTRY_CHOICES = [
        ('DE', _('Germany')),
        ('FR', _('France')),
        ('CA', _('Canada')),
        ('UK', _('United Kingdom')),
        ('US', _('United States')),
    ]

    slug = models.SlugField(max_length=100, unique=True)
    name = models.CharField(max_length=255)
    country = models.CharField(max_length=2, choices=COUNTRY_CHOICES, default='DE')
    description = models.TextField(blank=True)
    uses_custom_targets = models.BooleanField(
        default=False,
        help_text=_('Send letters to the imported target list instead of elected representatives')
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = _('Campaign')
        verbose_name_plural = _('Campaigns')

    def __str__(self):
        return f"{self.name} ({self.get_country_display()})"

    def get_absolute_url(self):
        return reverse('advocacy:campaign_targets_preview', kwargs={'slug': self.slug})


class CampaignTarget(models.Model):
    """A custom letter recipient imported by a campaign organizer."""

    campaign = models.ForeignKey(
        Campaign,
        on_delete=models.CASCADE,
        related_name='targets'
    )
    name = models.CharField(max_length=255)
    email = models.CharField(max_length=254)
    postal_code = models.CharField(max_length=20)
    city = models.CharField(max_length=255, null=True, blank=True)
    region = models.CharField(max_length=255, null=True, blank=True, help_text=_('State or province'))
    country_code = models.CharField(max_length=10, null=True, blank=True)
    category = models.CharField(
        max_length=100,
        null=True,
        blank=True,
        help_text=_('Optional label like University or NGO')
    )
    image_url = models.URLField(max_length=500, null=True, blank=True)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['campaign', 'name']
        indexes = [models.Index(fields=['campaign', 'postal_code'])]

    def __str__(self):
        return f"{self.name} <{self.email}>"
