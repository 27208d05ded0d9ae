"""Static default content templates, one per page name.

A page without a stored document is rendered from these templates until its
first publish.
"""
import copy

DEFAULT_PAGE_SECTIONS = {
    'home': {
        'hero': {
            'companyName': "ALISHA IT SOLUTION'S",
            'title': 'Creative & Innovative\nDigital Solution',
            'primaryButton': 'Free Quote',
            'secondaryButton': 'Contact Us',
        },
        'about': {
            'subtitle': 'ABOUT US',
            'title': 'The Best IT Solution With 10 Years of Experience',
            'description': (
                'We design, build and scale reliable digital systems for growing businesses, '
                'from the first prototype to round-the-clock operations.'
            ),
            'readMoreButton': 'Read More',
            'aboutImage': '',
        },
        'services': {
            'subtitle': 'OUR SERVICES',
            'title': 'We Provide The Best Service For You',
            'description': (
                'We offer comprehensive IT solutions tailored to your business needs. '
                'Our expert team delivers cutting-edge technology services.'
            ),
        },
        'statistics': {
            'items': [
                {'icon': 'users', 'label': 'Happy Clients', 'number': '200+'},
                {'icon': 'check', 'label': 'Projects Done', 'number': '500+'},
                {'icon': 'trophy', 'label': 'Win Awards', 'number': '25'},
            ],
        },
        'quote': {
            'subtitle': 'REQUEST A QUOTE',
            'title': 'Need A Free Quote? Please Feel Free to Contact Us',
            'description': 'Tell us about your project and we will get back to you within one business day.',
            'phoneNumber': '+012 345 6789',
        },
        'faq': {
            'subtitle': 'GENERAL FAQS',
            'title': 'Any Question? Check the FAQs or Contact Us',
            'questions': [
                {
                    'question': 'How long will it take to get a new website?',
                    'answer': 'Most marketing sites launch within four to six weeks of kickoff.',
                },
                {
                    'question': 'Will my website be mobile-friendly?',
                    'answer': 'Every page we ship is responsive and tested on phones and tablets.',
                },
            ],
        },
    },
    'about': {
        'hero': {
            'title': 'About Us',
        },
        'content': {
            'subtitle': 'ABOUT US',
            'title': 'The Best IT Solution With 10 Years of Experience',
            'description': 'A small senior team delivering web, cloud and mobile work since 2015.',
            'features': ['Professional Team', '24/7 Support', 'Quality Service'],
            'aboutImage': '',
        },
        'statistics': {
            'projects': '500+',
            'clients': '200+',
            'experience': '10+',
            'team': '50+',
        },
        'story': {
            'subtitle': 'OUR STORY',
            'title': 'How We Got Here',
        },
        'timeline': {
            'item1': {'date': '01 Jun, 2021', 'title': 'Regional expansion', 'description': 'Opened our second office.'},
            'item2': {'date': '01 Jan, 2021', 'title': 'Cloud practice', 'description': 'Launched managed cloud services.'},
            'item3': {'date': '01 Jun, 2020', 'title': 'Founded', 'description': 'Started with three engineers.'},
        },
        'team': {
            'subtitle': 'TEAM MEMBERS',
            'title': 'Professional Staff Ready to Help Your Business',
        },
    },
    'services': {
        'header': {
            'heroTitle': 'Service',
            'subtitle': 'OUR SERVICES',
            'title': 'Custom IT Solutions for Your Successful Business',
            'description': 'Web, cloud and mobile engineering delivered by one accountable team.',
        },
        'process': {
            'subtitle': 'WORK PROCESS',
            'title': 'How We Deliver',
            'steps': [
                {'title': 'Discover', 'description': 'Workshops to map goals and constraints.'},
                {'title': 'Design', 'description': 'Prototypes validated with real users.'},
                {'title': 'Build', 'description': 'Iterative delivery with weekly demos.'},
                {'title': 'Support', 'description': 'Monitoring and improvements after launch.'},
            ],
        },
    },
    'contact': {
        'hero': {
            'title': 'If You Have Any Query, Feel Free To Contact Us',
        },
        'info': {
            'phone': '+012 345 6789',
            'email': 'info@example.com',
            'address': '123 Street, New York, USA',
        },
        'form': {
            'title': 'Send Us A Message',
            'description': 'We usually answer within one business day.',
        },
        'map': {
            'title': 'Find Us',
            'description': 'Visit our office during business hours.',
            'image': '',
        },
    },
    'products': {
        'header': {
            'heroTitle': 'Our Products',
            'subtitle': 'OUR PRODUCTS',
            'title': 'Tools Built for Modern Teams',
            'description': 'Hardware and software bundles we support end to end.',
        },
    },
    'projects': {
        'header': {
            'heroTitle': 'Our Projects',
            'subtitle': 'OUR PROJECTS',
            'title': 'Recent Work We Are Proud Of',
            'description': 'A selection of client projects across web, cloud and mobile.',
        },
    },
}


def default_page_sections(page_name):
    """Return a private copy of the default sections for ``page_name`` ({} if unknown)."""
    return copy.deepcopy(DEFAULT_PAGE_SECTIONS.get(page_name, {}))
