"""
Admin Routes - Content management API
Every route requires an admin session.
"""

from flask import current_app, jsonify, request
from flask_login import current_user

from extensions import db
from models import (
    BlogComment,
    BlogPost,
    Contact,
    Experience,
    Language,
    NewsletterSubscriber,
    Project,
    SiteContent,
    Skill,
    SocialProfile,
    Testimonial,
    Translation,
)
from utils.crud import (
    SERVICES,
    blog_comments,
    blog_posts,
    contacts,
    newsletter,
    site_content,
    social_profiles,
)
from utils.data import to_camel
from utils.decorators import admin_required
from utils.errors import Unauthorized
from utils.schemas import (
    ChangePasswordSchema,
    CommentApprovalSchema,
    SubscriberStatusSchema,
    UploadSchema,
    validate_payload,
)
from utils.security import hash_password, log_audit_event, verify_password
from utils.uploads import save_data_uri
from . import admin_bp


def _audit(action, service, row_id):
    log_audit_event(f"{action}_{service.response_key}", username=current_user.username,
                    details=f"id={row_id}")


# Generic entity routes

def _list_view(service):
    def view():
        value = None
        if service.filter_field:
            value = request.args.get(to_camel(service.filter_field)) or None
        return jsonify(service.serialize_all(service.list(value)))
    return view


def _create_view(service):
    def view():
        data = request.get_json(silent=True)
        if service is blog_posts and isinstance(data, dict) and not data.get('authorId'):
            data['authorId'] = current_user.id
        row = service.create(data)
        _audit('create', service, row.id)
        return jsonify({
            'message': f"{service.label.capitalize()} created successfully",
            service.response_key: service.serialize(row)
        }), 201
    return view


def _update_view(service):
    def view(id):
        row = service.update(id, request.get_json(silent=True))
        _audit('update', service, row.id)
        return jsonify({
            'message': f"{service.label.capitalize()} updated successfully",
            service.response_key: service.serialize(row)
        })
    return view


def _delete_view(service):
    def view(id):
        service.delete(id)
        _audit('delete', service, id)
        return jsonify({'message': f"{service.label.capitalize()} deleted successfully"})
    return view


for segment, service in SERVICES.items():
    endpoint = segment.replace('-', '_').replace('/', '_')
    admin_bp.add_url_rule(f'/{segment}', f'list_{endpoint}',
                          admin_required(_list_view(service)))
    admin_bp.add_url_rule(f'/{segment}', f'create_{endpoint}',
                          admin_required(_create_view(service)), methods=['POST'])
    admin_bp.add_url_rule(f'/{segment}/<int:id>', f'update_{endpoint}',
                          admin_required(_update_view(service)), methods=['PUT', 'PATCH'])
    admin_bp.add_url_rule(f'/{segment}/<int:id>', f'delete_{endpoint}',
                          admin_required(_delete_view(service)), methods=['DELETE'])


@admin_bp.route('/social-profiles/<int:id>/sync', methods=['POST'])
@admin_required
def sync_social_profile(id):
    profile = social_profiles.sync(id)
    _audit('sync', social_profiles, profile.id)
    return jsonify({
        'message': 'Profile synced successfully',
        'profile': social_profiles.serialize(profile)
    })


# Site content

@admin_bp.route('/content')
@admin_required
def list_content():
    section = request.args.get('section') or None
    return jsonify(site_content.serialize_all(site_content.list(section)))


@admin_bp.route('/content', methods=['POST'])
@admin_required
def upsert_content():
    """Create or replace the value stored under (section, key)"""
    content, created = site_content.upsert(request.get_json(silent=True))
    _audit('create' if created else 'update', site_content, content.id)
    return jsonify({
        'message': 'Content saved successfully',
        'content': site_content.serialize(content)
    }), 201 if created else 200


@admin_bp.route('/content/<int:id>', methods=['PATCH', 'PUT'])
@admin_required
def update_content(id):
    content = site_content.update(id, request.get_json(silent=True))
    _audit('update', site_content, content.id)
    return jsonify({
        'message': 'Content updated successfully',
        'content': site_content.serialize(content)
    })


@admin_bp.route('/content/<int:id>', methods=['DELETE'])
@admin_required
def delete_content(id):
    site_content.delete(id)
    _audit('delete', site_content, id)
    return jsonify({'message': 'Content deleted successfully'})


# Contact messages

@admin_bp.route('/contacts')
@admin_required
def list_contacts():
    """Contact messages, newest first"""
    rows = contacts.query().order_by(Contact.id.desc()).all()
    return jsonify(contacts.serialize_all(rows))


@admin_bp.route('/contacts/<int:id>/read', methods=['PATCH'])
@admin_required
def mark_contact_read(id):
    contact = contacts.get(id)
    contact.is_read = True
    db.session.commit()
    return jsonify({
        'message': 'Message marked as read',
        'contact': contacts.serialize(contact)
    })


@admin_bp.route('/contacts/<int:id>', methods=['DELETE'])
@admin_required
def delete_contact(id):
    contacts.delete(id)
    _audit('delete', contacts, id)
    return jsonify({'message': 'Message deleted successfully'})


# Blog comments

@admin_bp.route('/blog/comments')
@admin_required
def list_comments():
    """All comments, optionally for one post, including unapproved ones"""
    post_id = request.args.get('postId', type=int)
    if post_id is not None:
        rows = blog_comments.list_for_post(post_id)
    else:
        rows = blog_comments.query().order_by(BlogComment.id).all()
    return jsonify(blog_comments.serialize_all(rows))


@admin_bp.route('/blog/comments/<int:id>/approval', methods=['PUT', 'PATCH'])
@admin_required
def set_comment_approval(id):
    blog_comments.get(id)
    values = validate_payload(CommentApprovalSchema, request.get_json(silent=True),
                              message='Invalid approval data')
    comment = blog_comments.set_approval(id, values['is_approved'])
    _audit('approve' if comment.is_approved else 'unapprove', blog_comments, comment.id)
    return jsonify({
        'message': 'Comment approved' if comment.is_approved else 'Comment hidden',
        'comment': blog_comments.serialize(comment)
    })


@admin_bp.route('/blog/comments/<int:id>', methods=['DELETE'])
@admin_required
def delete_comment(id):
    blog_comments.delete(id)
    _audit('delete', blog_comments, id)
    return jsonify({'message': 'Comment deleted successfully'})


# Newsletter

@admin_bp.route('/newsletter/subscribers')
@admin_required
def list_subscribers():
    only_active = request.args.get('active', '').lower() in ('1', 'true', 'yes')
    return jsonify(newsletter.serialize_all(newsletter.list_subscribers(only_active)))


@admin_bp.route('/newsletter/subscribers/<int:id>', methods=['PATCH', 'PUT'])
@admin_required
def update_subscriber(id):
    subscriber = newsletter.get(id)
    values = validate_payload(SubscriberStatusSchema, request.get_json(silent=True),
                              message='Invalid subscriber data')
    subscriber.is_active = values['is_active']
    db.session.commit()
    _audit('update', newsletter, subscriber.id)
    return jsonify({
        'message': 'Subscriber updated successfully',
        'subscriber': newsletter.serialize(subscriber)
    })


@admin_bp.route('/newsletter/subscribers/<int:id>', methods=['DELETE'])
@admin_required
def delete_subscriber(id):
    newsletter.delete(id)
    _audit('delete', newsletter, id)
    return jsonify({'message': 'Subscriber deleted successfully'})


# Uploads

@admin_bp.route('/upload', methods=['POST'])
@admin_required
def upload_file():
    """Store a base64 image and return its public path"""
    values = validate_payload(UploadSchema, request.get_json(silent=True),
                              message='Invalid file data')
    file_path = save_data_uri(values['base64_data'], values.get('filename'))
    log_audit_event('upload', username=current_user.username, details=file_path)
    return jsonify({'message': 'File uploaded successfully', 'filePath': file_path}), 201


# Dashboard

@admin_bp.route('/stats')
@admin_required
def get_stats():
    """Row counts for the admin dashboard"""
    return jsonify({
        'projects': Project.query.count(),
        'experiences': Experience.query.count(),
        'testimonials': Testimonial.query.count(),
        'skills': Skill.query.count(),
        'socialProfiles': SocialProfile.query.count(),
        'blogPosts': BlogPost.query.count(),
        'publishedPosts': BlogPost.query.filter_by(is_published=True).count(),
        'pendingComments': BlogComment.query.filter_by(is_approved=False).count(),
        'contacts': Contact.query.count(),
        'unreadContacts': Contact.query.filter_by(is_read=False).count(),
        'subscribers': NewsletterSubscriber.query.count(),
        'activeSubscribers': NewsletterSubscriber.query.filter_by(is_active=True).count(),
        'languages': Language.query.count(),
        'translations': Translation.query.count(),
        'contentItems': SiteContent.query.count()
    })


# Account

@admin_bp.route('/change-password', methods=['POST'])
@admin_required
def change_password():
    """Change the password of the signed-in admin"""
    values = validate_payload(ChangePasswordSchema, request.get_json(silent=True),
                              message='Invalid password data')
    if not verify_password(values['current_password'], current_user.password_hash):
        log_audit_event('password_change_failed', username=current_user.username)
        raise Unauthorized('Current password is incorrect')

    current_user.password_hash = hash_password(values['new_password'])
    db.session.commit()
    log_audit_event('password_changed', username=current_user.username)
    current_app.logger.info(f"Password changed for {current_user.username}")
    return jsonify({'message': 'Password changed successfully'})
